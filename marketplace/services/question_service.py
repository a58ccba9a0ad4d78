"""
Question Service

Questions can be asked many times; each one is answered at most once,
by the item owner (first answer wins).
"""
import logging
from typing import Dict, List

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.core.clock import utc_now
from marketplace.core.errors import (
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    QuestionAlreadyAnsweredError,
    StorageFailureError,
)
from marketplace.models import Item, Question
from marketplace.services.auction_service import AuctionService
from marketplace.services.sanitizer import get_sanitizer

logger = logging.getLogger(__name__)


class QuestionService:
    """Service for item questions and answers"""

    @staticmethod
    def ask_question(db: Session, item_id: int, asker_id: int, question_text: str) -> int:
        """
        Ask a question about an item

        Raises:
            NotFoundError: Item doesn't exist
            ForbiddenError: Asker owns the item
        """
        item = AuctionService.get_item(db, item_id)

        if item.owner_id == asker_id:
            raise ForbiddenError("Cannot ask question on your own item")

        question_text = get_sanitizer().sanitize(question_text)
        if not question_text:
            raise InvalidInputError("Question text is required")

        question = Question(item_id=item_id, asker_id=asker_id, question_text=question_text)

        try:
            db.add(question)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to store question: {e}", extra={'item_id': item_id})
            raise StorageFailureError("Database error") from e

        logger.info("Question asked", extra={'item_id': item_id, 'user_id': asker_id,
                                             'question_id': question.question_id})
        return question.question_id

    @staticmethod
    def answer_question(db: Session, question_id: int, user_id: int, answer_text: str) -> None:
        """
        Answer a question (once)

        The write is a conditional update on ``answer_text IS NULL`` so two
        racing answers can't both land.

        Raises:
            NotFoundError: Question doesn't exist
            ForbiddenError: Caller doesn't own the item
            QuestionAlreadyAnsweredError: Question already has an answer
        """
        row = db.query(Question.question_id, Item.owner_id).join(
            Item, Question.item_id == Item.item_id
        ).filter(Question.question_id == question_id).first()

        if not row:
            raise NotFoundError("Question not found")

        if row.owner_id != user_id:
            raise ForbiddenError("Only the auction creator can answer questions")

        answer_text = get_sanitizer().sanitize(answer_text)
        if not answer_text:
            raise InvalidInputError("Answer text is required")

        try:
            result = db.execute(
                update(Question)
                .where(Question.question_id == question_id, Question.answer_text.is_(None))
                .values(answer_text=answer_text, answered_at=utc_now())
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to store answer: {e}", extra={'question_id': question_id})
            raise StorageFailureError("Database error") from e

        if result.rowcount == 0:
            raise QuestionAlreadyAnsweredError("Question has already been answered")

        logger.info("Question answered", extra={'question_id': question_id, 'user_id': user_id})

    @staticmethod
    def get_questions(db: Session, item_id: int) -> List[Dict]:
        """All questions for an item, newest first"""
        AuctionService.get_item(db, item_id)

        questions = db.query(Question).filter(
            Question.item_id == item_id
        ).order_by(Question.question_id.desc()).all()

        return [question.to_dict() for question in questions]
