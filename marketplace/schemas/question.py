"""Pydantic schemas for questions"""
from pydantic import BaseModel, ConfigDict, Field


class QuestionCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    question_text: str = Field(..., min_length=1)


class AnswerCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    answer_text: str = Field(..., min_length=1)
