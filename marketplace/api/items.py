"""
Item API Routes

Handles:
- Creating items
- Item detail with derived current bid
- Search and status listings
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.core.config import get_settings
from marketplace.core.dependencies import get_current_user, get_optional_user
from marketplace.core.errors import InvalidInputError
from marketplace.infrastructure.database import get_db
from marketplace.models import User
from marketplace.schemas import ItemCreate
from marketplace.services import AuctionService, QueryService, ListingStatus

router = APIRouter(tags=["items"])


@router.post("/item", status_code=201)
def create_item(
    request: ItemCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new auction item"""
    item = AuctionService.create_item(
        db,
        owner_id=user.user_id,
        title=request.title,
        description=request.description,
        starting_price=request.starting_bid,
        closing_time=request.closing_time,
        category_ids=request.categories,
    )
    return {"item_id": item.item_id}


@router.get("/item/{item_id}")
def get_item(item_id: int, db: Session = Depends(get_db)):
    """Item detail with current bid and holder"""
    return QueryService.get_item_detail(db, item_id)


@router.get("/search")
def search(
    q: Optional[str] = None,
    limit: Optional[int] = Query(None),
    offset: int = Query(0),
    category: Optional[int] = None,
    status: Optional[str] = None,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    Search items

    With ``status`` (OPEN, BID or ARCHIVE) the caller's own listings are
    searched instead, which requires authentication.
    """
    if limit is None:
        limit = get_settings().DEFAULT_SEARCH_LIMIT

    if status:
        if user is None:
            raise InvalidInputError("Authentication required for status filters")

        if status not in ListingStatus.__members__:
            raise InvalidInputError("Invalid status value")

        return QueryService.list_by_status(
            db, user.user_id, ListingStatus(status), query=q, limit=limit, offset=offset
        )

    return QueryService.search(db, query=q, limit=limit, offset=offset, category_id=category)
