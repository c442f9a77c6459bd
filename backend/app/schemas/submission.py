from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmittedQuestion(_CamelModel):
    question: str = ""
    options: list[str] = Field(default_factory=list)
    correct: int | None = None
    # None means the student skipped the question.
    selected: int | None = None

    @field_validator("question", mode="before")
    @classmethod
    def _question_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("options", mode="before")
    @classmethod
    def _options_as_text(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return ["" if o is None else str(o) for o in v]
        return v


class Submission(_CamelModel):
    student_name: str
    questions: list[SubmittedQuestion]
    time_spent: int = 0
    time_left: int = 0
    leave_count: int = 0
    start_time: datetime | None = None

    @field_validator("time_spent", "time_left", "leave_count", mode="before")
    @classmethod
    def _missing_as_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("student_name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        return v.strip()


class ScoreSummary(BaseModel):
    total: int
    correct: int
    wrong: int
    unanswered: int
    percentage: int


class SubmissionAck(_CamelModel):
    success: bool = True
    message: str = "Test submitted successfully"
    student_name: str
    score: str
    percentage: int
    telegram_sent: bool
    telegram_error: str | None = None
