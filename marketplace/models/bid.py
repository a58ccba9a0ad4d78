"""
Bid Model

Rows are append-only: the ledger never updates or deletes a bid.
"""
from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from marketplace.models import Base


class Bid(Base):
    """Bid ledger entry"""

    __tablename__ = "bids"
    __table_args__ = (
        Index("ix_bids_item_amount", "item_id", "amount"),
    )

    bid_id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("items.item_id"), nullable=False, index=True)
    bidder_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    timestamp = Column(DateTime, nullable=False, index=True)

    bidder = relationship("User", lazy="joined")

    def to_dict(self):
        """Convert to dictionary"""
        return {
            "bid_id": self.bid_id,
            "item_id": self.item_id,
            "bidder_id": self.bidder_id,
            "amount": self.amount,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "first_name": self.bidder.first_name if self.bidder else None,
            "last_name": self.bidder.last_name if self.bidder else None,
        }
