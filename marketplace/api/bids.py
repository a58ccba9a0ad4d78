"""
Bid API Routes

Handles:
- Placing bids (synchronous admission)
- Getting bid history
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.core.dependencies import get_bid_service, get_current_user
from marketplace.infrastructure.database import get_db
from marketplace.models import User
from marketplace.schemas import BidCreate
from marketplace.services import BidService, QueryService

router = APIRouter(prefix="/item/{item_id}/bid", tags=["bids"])


@router.post("", status_code=201)
def place_bid(
    item_id: int,
    request: BidCreate,
    user: User = Depends(get_current_user),
    bid_service: BidService = Depends(get_bid_service),
    db: Session = Depends(get_db),
):
    """Place a bid; must be strictly greater than the current bid"""
    bid_id = bid_service.place_bid(db, item_id, user.user_id, request.amount)
    return {"bid_id": bid_id}


@router.get("")
def get_bid_history(item_id: int, db: Session = Depends(get_db)):
    """Bid history, highest amount first"""
    return QueryService.get_bid_history(db, item_id)
