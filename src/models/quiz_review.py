"""Quiz review database model."""

from sqlalchemy import JSON, Column, Integer, String
from .base import Base


class QuizReviewModel(Base):
    """Stored answers of one completed quiz."""

    __tablename__ = "quiz_reviews"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(20), index=True, nullable=False)
    responses = Column(JSON, nullable=False, default=list)
    create_at = Column(String, nullable=False)
