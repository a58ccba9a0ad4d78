"""
Category API Routes
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.infrastructure.database import get_db
from marketplace.services import CategoryService

router = APIRouter(tags=["categories"])


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    return CategoryService.list_categories(db)
