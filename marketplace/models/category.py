"""
Category Model
"""
from sqlalchemy import Column, Integer, String, Table, ForeignKey

from marketplace.models import Base


item_categories = Table(
    "item_categories",
    Base.metadata,
    Column("item_id", Integer, ForeignKey("items.item_id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.category_id", ondelete="CASCADE"), primary_key=True),
)


class Category(Base):
    """Item category"""

    __tablename__ = "categories"

    category_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)

    def to_dict(self):
        return {"category_id": self.category_id, "name": self.name}
