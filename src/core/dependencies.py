"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes.
Every request gets its own database session, and the stores and service built
on it.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils.auth_service import AuthService
from utils.review_store import ReviewStore
from utils.user_store import SqlUserStore


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Get AuthService instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        AuthService instance.
    """
    return AuthService(SqlUserStore(db), review_store=ReviewStore(db))


# Type aliases for dependency injection
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
