"""
Question API Routes
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.core.dependencies import get_current_user
from marketplace.infrastructure.database import get_db
from marketplace.models import User
from marketplace.schemas import AnswerCreate, QuestionCreate
from marketplace.services import QuestionService

router = APIRouter(tags=["questions"])


@router.post("/item/{item_id}/question")
def ask_question(
    item_id: int,
    request: QuestionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    question_id = QuestionService.ask_question(db, item_id, user.user_id, request.question_text)
    return {"question_id": question_id}


@router.get("/item/{item_id}/question")
def get_questions(item_id: int, db: Session = Depends(get_db)):
    return QuestionService.get_questions(db, item_id)


@router.post("/question/{question_id}")
def answer_question(
    question_id: int,
    request: AnswerCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Answer a question on one of your items; each question is answered once"""
    QuestionService.answer_question(db, question_id, user.user_id, request.answer_text)
    return {"success": True}
