"""Quiz review storage.

Reviews reference their owner by username. Account deletion removes a user's
reviews through ``delete_for_user`` before the user record itself goes.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StorageError
from models.quiz_review import QuizReviewModel
from schemas.review import QuizReview
from utils.converters import model_to_review, review_to_model

logger = logging.getLogger(__name__)


class ReviewStore:
    """Manages stored quiz reviews using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize ReviewStore.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def add_review(self, review: QuizReview) -> None:
        try:
            self.db.add(review_to_model(review))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Could not add review") from e

    def list_for_user(self, username: str) -> List[QuizReview]:
        """List a user's reviews, oldest first."""
        try:
            models = (
                self.db.query(QuizReviewModel)
                .filter(QuizReviewModel.username == username)
                .order_by(QuizReviewModel.create_at, QuizReviewModel.id)
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Could not fetch reviews") from e
        return [model_to_review(m) for m in models]

    def delete_for_user(self, username: str) -> int:
        """Delete every review owned by a user.

        Returns:
            Number of reviews removed.
        """
        try:
            removed = (
                self.db.query(QuizReviewModel)
                .filter(QuizReviewModel.username == username)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Could not delete reviews") from e
        logger.info("Deleted %d reviews of user: %s", removed, username)
        return removed
