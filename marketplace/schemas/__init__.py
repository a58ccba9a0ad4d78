"""
Pydantic request schemas
"""
from marketplace.schemas.user import UserCreate, LoginRequest
from marketplace.schemas.item import ItemCreate
from marketplace.schemas.bid import BidCreate
from marketplace.schemas.question import QuestionCreate, AnswerCreate

__all__ = [
    "UserCreate",
    "LoginRequest",
    "ItemCreate",
    "BidCreate",
    "QuestionCreate",
    "AnswerCreate",
]
