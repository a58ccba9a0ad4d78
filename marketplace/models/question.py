"""
Question Model
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey

from marketplace.core.clock import utc_now
from marketplace.models import Base


class Question(Base):
    """Question about an item; answer_text is written at most once"""

    __tablename__ = "questions"

    question_id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("items.item_id"), nullable=False, index=True)
    asker_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    question_text = Column(Text, nullable=False)
    answer_text = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    answered_at = Column(DateTime, nullable=True)

    def to_dict(self):
        return {
            "question_id": self.question_id,
            "item_id": self.item_id,
            "asker_id": self.asker_id,
            "question_text": self.question_text,
            "answer_text": self.answer_text,
        }
