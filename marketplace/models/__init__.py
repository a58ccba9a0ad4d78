"""
Database Models
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import models after Base is defined
from marketplace.models.user import User
from marketplace.models.category import Category, item_categories
from marketplace.models.item import Item, AuctionStatus
from marketplace.models.bid import Bid
from marketplace.models.question import Question

__all__ = [
    "Base",
    "User",
    "Category",
    "item_categories",
    "Item",
    "AuctionStatus",
    "Bid",
    "Question",
]
