"""Schemas for answer generation, history and export endpoints."""

from typing import List, Optional

from pydantic import BaseModel, Field

from app.services.answer_generator import MarksWeightage
from app.services.store import GeneratedAnswer


class ParseRequest(BaseModel):
    text: str = Field(..., description="Raw pasted question text")
    batch_mode: bool = Field(default=False, description="Split the text into several questions")


class ParseResponse(BaseModel):
    questions: List[str] = Field(..., description="Questions detected in the text, in order")
    count: int = Field(..., ge=0, description="Number of detected questions")


class GenerateRequest(BaseModel):
    text: Optional[str] = Field(
        default=None,
        description="One question, or several when batch_mode is set; defaults to the current input",
    )
    marks: MarksWeightage = Field(default=MarksWeightage.five, description="Marks weightage")
    style: Optional[str] = Field(
        default=None,
        description="Built-in or custom style name; defaults to the currently active style",
    )
    batch_mode: Optional[bool] = Field(
        default=None,
        description="Treat the text as a batch of questions; defaults to the current mode",
    )


class AnswerResponse(BaseModel):
    id: str
    question: str
    marks: MarksWeightage
    style: str
    answer: str
    timestamp: int = Field(..., description="Creation time in epoch milliseconds")

    @classmethod
    def from_answer(cls, answer: GeneratedAnswer) -> "AnswerResponse":
        return cls(**answer.to_dict())


class GenerateResponse(BaseModel):
    answers: List[AnswerResponse] = Field(..., description="Answers in question order")
    current_answer_id: str = Field(..., description="Id of the answer for the last question")
    history_count: int = Field(..., ge=0)


class HistoryResponse(BaseModel):
    items: List[AnswerResponse] = Field(..., description="Most recent first")
    capacity: int


class DigestResponse(BaseModel):
    text: str = Field(..., description="All history entries, oldest first, as plain text")


class SuggestRequest(BaseModel):
    topic: str = Field(..., description="Subject or topic to suggest questions for")


class SuggestResponse(BaseModel):
    questions_text: str = Field(..., description="Numbered questions, one per line")
    count: int = Field(..., ge=0, description="Questions detected in batch mode")
