"""
Ledger Store

Append-only record of bids per item. ``append`` is the only mutation and
it never commits: the bid becomes visible when the caller's transaction
commits, so readers never see a half-written bid.

Ordering for reads: amount descending, then timestamp ascending, then
bid_id ascending (first bid at an amount wins).
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.core.errors import StorageFailureError
from marketplace.models import Bid

logger = logging.getLogger(__name__)

LEDGER_ORDER = (Bid.amount.desc(), Bid.timestamp.asc(), Bid.bid_id.asc())


class LedgerStore:
    """Bid ledger backed by the bids table"""

    @staticmethod
    def append(db: Session, item_id: int, bidder_id: int, amount: Decimal, timestamp: datetime) -> int:
        """
        Append a bid and return its id

        Raises:
            StorageFailureError: If the insert fails
        """
        bid = Bid(
            item_id=item_id,
            bidder_id=bidder_id,
            amount=amount,
            timestamp=timestamp,
        )

        try:
            db.add(bid)
            db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Ledger append failed: {e}", extra={'item_id': item_id})
            raise StorageFailureError("Database error") from e

        return bid.bid_id

    @staticmethod
    def read_all(db: Session, item_id: int) -> List[Bid]:
        """All bids for the item in ledger order"""
        try:
            return db.query(Bid).filter(Bid.item_id == item_id).order_by(*LEDGER_ORDER).all()
        except SQLAlchemyError as e:
            logger.error(f"Ledger read failed: {e}", extra={'item_id': item_id})
            raise StorageFailureError("Database error") from e

    @staticmethod
    def read_max(db: Session, item_id: int) -> Optional[Bid]:
        """Highest bid for the item, or None"""
        try:
            return db.query(Bid).filter(Bid.item_id == item_id).order_by(*LEDGER_ORDER).first()
        except SQLAlchemyError as e:
            logger.error(f"Ledger read failed: {e}", extra={'item_id': item_id})
            raise StorageFailureError("Database error") from e

    @staticmethod
    def read_latest(db: Session, item_id: int) -> Optional[Bid]:
        """Most recently admitted bid for the item, or None"""
        try:
            return db.query(Bid).filter(
                Bid.item_id == item_id
            ).order_by(Bid.timestamp.desc(), Bid.bid_id.desc()).first()
        except SQLAlchemyError as e:
            logger.error(f"Ledger read failed: {e}", extra={'item_id': item_id})
            raise StorageFailureError("Database error") from e

    @staticmethod
    def count(db: Session, item_id: int) -> int:
        try:
            return db.query(Bid).filter(Bid.item_id == item_id).count()
        except SQLAlchemyError as e:
            raise StorageFailureError("Database error") from e
