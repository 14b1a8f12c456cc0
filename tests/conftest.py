"""Shared fixtures for the account service tests."""

import os

# Must be set before config is imported anywhere
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ADMIN_TOKEN"] = "test-admin-token"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STRICT_STRIKE_WRITES"] = "false"

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.exceptions import StorageError
from models.base import Base
from schemas.user import AccessLevel, User
from utils.auth_service import AuthService
from utils.passwords import hash_password
from utils.review_store import ReviewStore
from utils.user_store import InMemoryUserStore, SqlUserStore


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def sql_store(db):
    return SqlUserStore(db)


@pytest.fixture
def review_store(db):
    return ReviewStore(db)


@pytest.fixture
def memory_store():
    return InMemoryUserStore()


@pytest.fixture
def make_user():
    """Factory for users with a real password hash."""

    def _make_user(
        username="alice",
        password="hunter22",
        strikes=0,
        access_level=AccessLevel.USER,
        date_of_birth=date(2007, 9, 14),
    ):
        return User(
            username=username,
            password_hash=hash_password(password),
            date_of_birth=date_of_birth,
            access_level=access_level,
            strikes=strikes,
        )

    return _make_user


@pytest.fixture
def service(memory_store):
    return AuthService(memory_store, lock_threshold=3)


class FlakyUserStore(InMemoryUserStore):
    """In-memory store whose operations can be made to fail."""

    def __init__(self):
        super().__init__()
        self.fail_find = False
        self.fail_list = False
        self.fail_delete = False
        # Number of upcoming strike writes that fail; -1 fails all of them
        self.failing_writes = 0
        self.write_calls = 0

    def _maybe_fail_write(self):
        self.write_calls += 1
        if self.failing_writes != 0:
            if self.failing_writes > 0:
                self.failing_writes -= 1
            raise StorageError("write failed")

    def find_by_username(self, username):
        if self.fail_find:
            raise StorageError("unreachable")
        return super().find_by_username(username)

    def set_strikes(self, username, value):
        self._maybe_fail_write()
        return super().set_strikes(username, value)

    def increment_strikes(self, username):
        self._maybe_fail_write()
        return super().increment_strikes(username)

    def reset_strikes_below(self, username, threshold):
        self._maybe_fail_write()
        return super().reset_strikes_below(username, threshold)

    def delete(self, username):
        if self.fail_delete:
            raise StorageError("delete failed")
        super().delete(username)

    def list_all(self):
        if self.fail_list:
            raise StorageError("unreachable")
        return super().list_all()


@pytest.fixture
def flaky_store():
    return FlakyUserStore()
