"""
Auction Service - Auction Registry

Handles:
- Item creation (validated against item invariants)
- Item lookup
- Derived auction state (current price, holder, status)
"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.core.clock import to_naive_utc, utc_now
from marketplace.core.errors import InvalidInputError, MarketplaceError, NotFoundError, StorageFailureError
from marketplace.models import Item
from marketplace.services.category_service import CategoryService
from marketplace.services.ledger import LedgerStore
from marketplace.services.sanitizer import get_sanitizer

logger = logging.getLogger(__name__)

MONEY_QUANTUM = Decimal("0.01")

# Numeric(12, 2): ten integer digits
MONEY_LIMIT = Decimal("1e10")


def to_money(value) -> Decimal:
    """
    Convert a number to a two-place Decimal

    Raises:
        InvalidInputError: If the value isn't a finite number with at most
            two decimal places, or doesn't fit a Numeric(12, 2) column
    """
    if isinstance(value, bool):
        raise InvalidInputError("Amount must be a number")

    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidInputError("Amount must be a number") from e

    if not amount.is_finite():
        raise InvalidInputError("Amount must be a number")

    if abs(amount) >= MONEY_LIMIT:
        raise InvalidInputError("Amount is out of range")

    try:
        quantized = amount.quantize(MONEY_QUANTUM)
    except InvalidOperation as e:
        raise InvalidInputError("Amount is out of range") from e

    if quantized != amount:
        raise InvalidInputError("Amount can have at most two decimal places")

    return quantized


class AuctionService:
    """
    Service for auction items

    Items are immutable once created; everything that changes over the
    life of an auction is derived from the bid ledger.
    """

    @staticmethod
    def create_item(
        db: Session,
        owner_id: int,
        title: str,
        description: str,
        starting_price,
        closing_time: datetime,
        category_ids: Optional[Iterable[int]] = None,
        now: Optional[datetime] = None,
    ) -> Item:
        """
        Create a new auction item

        Business rules:
        - Title and description must be non-empty after sanitizing
        - Starting price must be >= 0
        - Closing time must be after the opening time (now)

        Raises:
            InvalidInputError: If validation fails
        """
        now = to_naive_utc(now) or utc_now()
        closing_time = to_naive_utc(closing_time)
        sanitizer = get_sanitizer()

        title = sanitizer.sanitize(title)
        description = sanitizer.sanitize(description)

        if not title:
            raise InvalidInputError("Title is required")

        if not description:
            raise InvalidInputError("Description is required")

        starting_price = to_money(starting_price)
        if starting_price < 0:
            raise InvalidInputError("Starting price must be non-negative")

        if closing_time is None or closing_time <= now:
            raise InvalidInputError("Closing time must be in the future")

        item = Item(
            owner_id=owner_id,
            title=title,
            description=description,
            starting_price=starting_price,
            opening_time=now,
            closing_time=closing_time,
        )

        try:
            db.add(item)
            CategoryService.associate(db, item, category_ids)
            db.commit()
        except MarketplaceError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create item: {e}", extra={'user_id': owner_id})
            raise StorageFailureError("Database error") from e

        db.refresh(item)

        logger.info(f"Created item {item.item_id}: {item.title}",
                    extra={'item_id': item.item_id, 'user_id': owner_id})

        return item

    @staticmethod
    def get_item(db: Session, item_id: int) -> Item:
        """
        Look up an item

        Raises:
            NotFoundError: If the item doesn't exist
        """
        try:
            item = db.get(Item, item_id)
        except SQLAlchemyError as e:
            logger.error(f"Item lookup failed: {e}", extra={'item_id': item_id})
            raise StorageFailureError("Database error") from e

        if not item:
            raise NotFoundError("Item not found")

        return item

    @staticmethod
    def derive_state(db: Session, item: Item, now: Optional[datetime] = None) -> Dict:
        """
        Current price, holder and status of an item

        current_price is the highest bid, or the starting price when the
        ledger is empty.
        """
        now = to_naive_utc(now) or utc_now()
        top_bid = LedgerStore.read_max(db, item.item_id)

        if top_bid:
            current_price = top_bid.amount
            current_holder = top_bid.bidder.to_public_dict() if top_bid.bidder else {"user_id": top_bid.bidder_id}
        else:
            current_price = item.starting_price
            current_holder = None

        return {
            "current_price": current_price,
            "current_holder": current_holder,
            "status": item.status_at(now).value,
        }
