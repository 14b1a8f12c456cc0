"""Quiz review schema definitions."""

from datetime import datetime
from typing import List

import pytz
from pydantic import BaseModel, Field, model_validator


class Response(BaseModel):
    """One answered question of a quiz."""
    question: str
    submitted: str
    answer: str
    is_correct: bool = False

    @model_validator(mode="after")
    def mark(self) -> "Response":
        # correctness is always derived, never trusted from input
        self.is_correct = self.submitted == self.answer
        return self


class QuizReview(BaseModel):
    username: str
    responses: List[Response] = Field(default=[])
    create_at: str = Field(
        default_factory=lambda: datetime.now(pytz.utc).isoformat()
    )
