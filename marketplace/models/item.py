"""
Item Model
"""
import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from marketplace.core.clock import utc_now
from marketplace.models import Base
from marketplace.models.category import item_categories


class AuctionStatus(str, enum.Enum):
    """Derived auction status"""
    OPEN = "OPEN"
    ARCHIVED = "ARCHIVED"


class Item(Base):
    """
    Auction item

    Immutable after creation. Price, holder and status are derived from
    the bid ledger on read, never stored here.
    """

    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("starting_price >= 0", name="ck_items_starting_price"),
        CheckConstraint("closing_time > opening_time", name="ck_items_closing_after_opening"),
    )

    item_id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    starting_price = Column(Numeric(12, 2), nullable=False)
    opening_time = Column(DateTime, nullable=False, default=utc_now)
    closing_time = Column(DateTime, nullable=False, index=True)

    owner = relationship("User", lazy="joined")
    categories = relationship("Category", secondary=item_categories, order_by="Category.name")

    def __repr__(self):
        return f"<Item(item_id={self.item_id}, title='{self.title}', closing='{self.closing_time}')>"

    def status_at(self, now: datetime) -> AuctionStatus:
        """OPEN strictly before closing time, ARCHIVED from closing time on"""
        return AuctionStatus.OPEN if now < self.closing_time else AuctionStatus.ARCHIVED

    def to_summary_dict(self):
        """Listing row"""
        return {
            "item_id": self.item_id,
            "title": self.title,
            "description": self.description,
            "closing_time": self.closing_time.isoformat(),
            "owner_id": self.owner_id,
            "first_name": self.owner.first_name if self.owner else None,
            "last_name": self.owner.last_name if self.owner else None,
        }
