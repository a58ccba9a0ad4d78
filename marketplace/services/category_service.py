"""
Category Service

Lists categories and links them to items.
"""
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.core.errors import InvalidInputError, StorageFailureError
from marketplace.models import Category, Item

logger = logging.getLogger(__name__)


class CategoryService:
    """Category tagger"""

    @staticmethod
    def list_categories(db: Session) -> List[Dict]:
        """All categories sorted by name"""
        try:
            categories = db.query(Category).order_by(Category.name.asc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list categories: {e}")
            raise StorageFailureError("Database error") from e
        return [category.to_dict() for category in categories]

    @staticmethod
    def associate(db: Session, item: Item, category_ids: Optional[Iterable[int]]) -> None:
        """
        Attach categories to an item inside the caller's transaction

        Raises:
            InvalidInputError: If any category id doesn't exist
        """
        if not category_ids:
            return

        wanted = set(category_ids)
        categories = db.query(Category).filter(Category.category_id.in_(wanted)).all()

        if len(categories) != len(wanted):
            raise InvalidInputError("Invalid category ID(s)")

        item.categories.extend(categories)

    @staticmethod
    def seed_defaults(db: Session, names: Iterable[str]) -> int:
        """Insert any missing default categories; returns how many were added"""
        existing = {name for (name,) in db.query(Category.name).all()}
        added = 0

        for name in names:
            if name not in existing:
                db.add(Category(name=name))
                existing.add(name)
                added += 1

        if added:
            db.commit()
            logger.info(f"Seeded {added} categories")

        return added
