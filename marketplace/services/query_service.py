"""
Query Service - read-only projections

Handles:
- Item detail with derived current bid
- Bid history
- Status listings (OPEN / BID / ARCHIVE) and general search

Reads take no item lock; each bid is committed whole, so a read can be
slightly stale but never sees a partial bid.
"""
import enum
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from marketplace.core.clock import to_naive_utc, utc_now
from marketplace.core.errors import InvalidInputError, StorageFailureError
from marketplace.models import Bid, Category, Item
from marketplace.services.auction_service import AuctionService
from marketplace.services.ledger import LedgerStore

logger = logging.getLogger(__name__)


class ListingStatus(str, enum.Enum):
    """Status filters for a user's listings"""
    OPEN = "OPEN"        # selling, closing in the future
    BID = "BID"          # has bid on, closing in the future
    ARCHIVE = "ARCHIVE"  # selling, closed


class QueryService:
    """Read side of the marketplace"""

    @staticmethod
    def get_item_detail(db: Session, item_id: int, now: Optional[datetime] = None) -> Dict:
        """Item joined with its derived price, holder and status"""
        item = AuctionService.get_item(db, item_id)
        state = AuctionService.derive_state(db, item, now)

        return {
            "item_id": item.item_id,
            "owner_id": item.owner_id,
            "title": item.title,
            "description": item.description,
            "starting_price": item.starting_price,
            "opening_time": item.opening_time.isoformat(),
            "closing_time": item.closing_time.isoformat(),
            "first_name": item.owner.first_name,
            "last_name": item.owner.last_name,
            "bid_count": LedgerStore.count(db, item.item_id),
            "categories": [category.to_dict() for category in item.categories],
            **state,
        }

    @staticmethod
    def get_bid_history(db: Session, item_id: int) -> List[Dict]:
        """Full ledger for an item, highest amount first"""
        AuctionService.get_item(db, item_id)
        return [bid.to_dict() for bid in LedgerStore.read_all(db, item_id)]

    @staticmethod
    def list_by_status(
        db: Session,
        user_id: int,
        status,
        query: Optional[str] = None,
        limit: Optional[int] = 10,
        offset: int = 0,
        now: Optional[datetime] = None,
    ) -> List[Dict]:
        """
        A user's listings filtered by status

        Args:
            user_id: Seller (OPEN, ARCHIVE) or bidder (BID)
            status: ListingStatus or its string value
            query: Case-insensitive substring on title/description
            limit: Page size; None means no limit
            offset: Rows to skip

        Raises:
            InvalidInputError: Unknown status or negative paging values
        """
        try:
            status = ListingStatus(status)
        except ValueError as e:
            raise InvalidInputError("Invalid status value") from e

        now = to_naive_utc(now) or utc_now()
        items = db.query(Item)

        if status == ListingStatus.OPEN:
            items = items.filter(Item.owner_id == user_id, Item.closing_time > now)
        elif status == ListingStatus.BID:
            bid_on = db.query(Bid.item_id).filter(Bid.bidder_id == user_id)
            items = items.filter(Item.item_id.in_(bid_on), Item.closing_time > now)
        else:
            items = items.filter(Item.owner_id == user_id, Item.closing_time <= now)

        return QueryService._page(items, query, limit, offset)

    @staticmethod
    def search(
        db: Session,
        query: Optional[str] = None,
        limit: Optional[int] = 10,
        offset: int = 0,
        category_id: Optional[int] = None,
    ) -> List[Dict]:
        """General search over all items, optionally within one category"""
        items = db.query(Item)

        if category_id is not None:
            items = items.filter(Item.categories.any(Category.category_id == category_id))

        return QueryService._page(items, query, limit, offset)

    @staticmethod
    def _page(items: Query, query: Optional[str], limit: Optional[int], offset: int) -> List[Dict]:
        """Apply text filter, stable ordering and pagination"""
        if limit is not None and limit < 0:
            raise InvalidInputError("limit must be non-negative")

        if offset is None:
            offset = 0
        if offset < 0:
            raise InvalidInputError("offset must be non-negative")

        if query:
            pattern = f"%{_escape_like(query.lower())}%"
            items = items.filter(or_(
                Item.title.ilike(pattern, escape="\\"),
                Item.description.ilike(pattern, escape="\\"),
            ))

        items = items.order_by(Item.item_id.asc()).offset(offset)
        if limit is not None:
            items = items.limit(limit)

        try:
            return [item.to_summary_dict() for item in items.all()]
        except SQLAlchemyError as e:
            logger.error(f"Listing query failed: {e}")
            raise StorageFailureError("Database error") from e


def _escape_like(text: str) -> str:
    """Treat LIKE wildcards in user input literally"""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
