"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import Column, Date, Integer, String
from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(20), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    date_of_birth = Column(Date, nullable=False)
    access_level = Column(String, nullable=False)  # 'USER', 'TEACHER' or 'ADMIN'
    strikes = Column(Integer, nullable=False, default=0)
    create_at = Column(String, nullable=False)  # ISO format string
