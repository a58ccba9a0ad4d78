"""
Bid Service - Bid Admission Engine

The read-validate-append sequence for one item runs inside a single
critical section:

1. per-item lock (ItemLock backend: in-process or Redis)
2. row lock on the item (SELECT ... FOR UPDATE, where supported)
3. read current max -> validate -> append -> commit

Bids for different items never wait on each other. Nothing here is
retried: a failed append is reported to the caller, who decides.
"""
import logging
import time
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, lazyload

from marketplace.core.clock import to_naive_utc, utc_now
from marketplace.core.errors import (
    AuctionClosedError,
    ForbiddenError,
    InvalidBidError,
    InvalidInputError,
    MarketplaceError,
    NotFoundError,
    StorageFailureError,
)
from marketplace.infrastructure.lock import ItemLock, get_item_lock
from marketplace.models import Item
from marketplace.services.auction_service import to_money
from marketplace.services.ledger import LedgerStore

logger = logging.getLogger(__name__)


class BidService:
    """
    Admits bids against the item registry and the ledger

    Responsibilities:
    1. Reject unknown items, self-bids and bids after closing
    2. Require amount strictly greater than the current floor
    3. Append atomically under the item's lock
    """

    def __init__(self, item_lock: Optional[ItemLock] = None):
        self.item_lock = item_lock or get_item_lock()

    def place_bid(
        self,
        db: Session,
        item_id: int,
        bidder_id: int,
        amount,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Place a bid

        Args:
            db: Database session (owned by the caller, one per request)
            item_id: Item being bid on
            bidder_id: Authenticated bidder
            amount: Bid amount
            now: Admission time, defaults to the current UTC time

        Returns:
            New bid id

        Raises:
            NotFoundError: Item doesn't exist
            ForbiddenError: Bidder owns the item
            AuctionClosedError: now >= closing time
            InvalidBidError: Amount not strictly above the floor
            ItemBusyError: Item lock not acquired in time
            StorageFailureError: Store failed; nothing was admitted
        """
        now = to_naive_utc(now) or utc_now()

        try:
            amount = to_money(amount)
        except InvalidInputError as e:
            raise InvalidBidError(e.message) from e

        start_time = time.perf_counter()

        with self.item_lock.lock(item_id) as retry_count:
            try:
                bid_id = self._admit(db, item_id, bidder_id, amount, now)
                db.commit()
            except MarketplaceError as e:
                db.rollback()
                logger.info(f"Bid rejected: {e.message}",
                            extra={'item_id': item_id, 'bidder_id': bidder_id, 'amount': amount})
                raise
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Bid admission failed: {e}",
                             extra={'item_id': item_id, 'bidder_id': bidder_id, 'amount': amount})
                raise StorageFailureError("Database error") from e

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(
            f"Bid admitted on item {item_id}" + (f" after {retry_count} lock retries" if retry_count else ""),
            extra={'item_id': item_id, 'bidder_id': bidder_id, 'bid_id': bid_id,
                   'amount': amount, 'duration_ms': duration_ms}
        )

        return bid_id

    def _admit(self, db: Session, item_id: int, bidder_id: int, amount: Decimal, now: datetime) -> int:
        """Validate and append; caller holds the item lock and commits"""
        item = db.query(Item).options(
            lazyload(Item.owner)
        ).filter(
            Item.item_id == item_id
        ).with_for_update().first()

        if not item:
            raise NotFoundError("Item not found")

        if item.owner_id == bidder_id:
            raise ForbiddenError("Cannot bid on your own item")

        if now >= item.closing_time:
            raise AuctionClosedError("Auction has closed")

        top_bid = LedgerStore.read_max(db, item_id)
        floor = top_bid.amount if top_bid else item.starting_price

        if amount <= floor:
            raise InvalidBidError(f"Bid must be greater than current bid of {floor}")

        # Keep per-item timestamps non-decreasing even if caller clocks drift
        latest = LedgerStore.read_latest(db, item_id)
        timestamp = max(now, latest.timestamp) if latest else now

        return LedgerStore.append(db, item_id, bidder_id, amount, timestamp)
