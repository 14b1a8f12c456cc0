"""Database models.

Importing this package registers every model with ``Base.metadata``.
"""

from .base import Base
from .user import UserModel
from .quiz_review import QuizReviewModel

__all__ = ["Base", "UserModel", "QuizReviewModel"]
