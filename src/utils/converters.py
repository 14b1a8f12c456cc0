"""Conversions between database models and schema objects."""

from models.quiz_review import QuizReviewModel
from models.user import UserModel
from schemas.review import QuizReview
from schemas.user import AccessLevel, User


def user_to_model(user: User) -> UserModel:
    return UserModel(
        username=user.username,
        password_hash=user.password_hash,
        date_of_birth=user.date_of_birth,
        access_level=user.access_level.value,
        strikes=user.strikes,
        create_at=user.create_at,
    )


def model_to_user(model: UserModel) -> User:
    return User(
        username=model.username,
        password_hash=model.password_hash,
        date_of_birth=model.date_of_birth,
        access_level=AccessLevel(model.access_level),
        strikes=model.strikes,
        create_at=model.create_at,
    )


def review_to_model(review: QuizReview) -> QuizReviewModel:
    return QuizReviewModel(
        username=review.username,
        responses=[r.model_dump() for r in review.responses],
        create_at=review.create_at,
    )


def model_to_review(model: QuizReviewModel) -> QuizReview:
    return QuizReview(
        username=model.username,
        responses=model.responses or [],
        create_at=model.create_at,
    )
