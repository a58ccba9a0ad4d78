"""
FastAPI Dependencies

Identity is resolved per request from the X-Authorization header and
handed to route functions; services never read ambient session state.
"""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from marketplace.core.errors import UnauthenticatedError
from marketplace.infrastructure.database import get_db
from marketplace.infrastructure.lock import get_item_lock
from marketplace.models import User
from marketplace.services import BidService, UserService


def get_current_user(
    token: Optional[str] = Header(None, alias="X-Authorization"),
    db: Session = Depends(get_db),
) -> User:
    """Authenticated user, or 401"""
    return UserService.authenticate(db, token)


def get_optional_user(
    token: Optional[str] = Header(None, alias="X-Authorization"),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Authenticated user if a valid token was sent, else None"""
    if not token:
        return None
    try:
        return UserService.authenticate(db, token)
    except UnauthenticatedError:
        return None


def get_bid_service() -> BidService:
    """Bid admission engine bound to the configured item lock"""
    return BidService(get_item_lock())
