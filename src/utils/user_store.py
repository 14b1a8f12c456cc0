"""User record storage.

This module provides the ``UserStore`` interface used by the account service
and two implementations: ``SqlUserStore`` backed by a SQLAlchemy session, and
``InMemoryUserStore`` backed by a dictionary.

Strike counters are changed with ``increment_strikes``,
``reset_strikes_below`` and ``set_strikes``. Each is a single atomic
operation in the store (one ``UPDATE`` statement, or one update under the
store lock), so concurrent failed logins never lose an increment.
``reset_strikes_below`` only clears a counter that is still under the lock
threshold, so a login that raced with the failure locking the account cannot
reopen it. All three return ``False`` when no record matched.

Any failure of the underlying storage is raised as ``StorageError``.
"""

import copy
import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import DuplicateUsernameError, StorageError
from models.user import UserModel
from schemas.user import User
from utils.converters import model_to_user, user_to_model

logger = logging.getLogger(__name__)


class UserStore(ABC):
    """Keyed storage of User records, queried by username."""

    @abstractmethod
    def find_by_username(self, username: str) -> Optional[User]:
        """Return the user with this username, or None if there is none."""

    @abstractmethod
    def insert(self, user: User) -> None:
        """Add a new record.

        Raises:
            DuplicateUsernameError: If the username is already stored.
            StorageError: If the record could not be written.
        """

    @abstractmethod
    def set_strikes(self, username: str, value: int) -> bool:
        """Overwrite the strike counter. Returns False if no record matched."""

    @abstractmethod
    def increment_strikes(self, username: str) -> bool:
        """Atomically add one strike. Returns False if no record matched."""

    @abstractmethod
    def reset_strikes_below(self, username: str, threshold: int) -> bool:
        """Set strikes to 0 only if they are below ``threshold``.

        Returns False if no record matched, including a record whose counter
        has already reached the threshold.
        """

    @abstractmethod
    def delete(self, username: str) -> None:
        """Remove the record if present. Removing a missing record is a no-op."""

    @abstractmethod
    def list_all(self) -> List[User]:
        """Return every stored user, ordered by username."""


class SqlUserStore(UserStore):
    """UserStore over a SQLAlchemy session."""

    def __init__(self, db: Session):
        """Initialize SqlUserStore.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def _fail(self, action: str, error: SQLAlchemyError) -> StorageError:
        self.db.rollback()
        logger.error("User store could not %s: %s", action, error)
        return StorageError(f"Could not {action}")

    def find_by_username(self, username: str) -> Optional[User]:
        try:
            model = (
                self.db.query(UserModel)
                .filter(UserModel.username == username)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail("fetch user", e) from e
        if model:
            return model_to_user(model)
        return None

    def insert(self, user: User) -> None:
        try:
            existing = (
                self.db.query(UserModel.id)
                .filter(UserModel.username == user.username)
                .first()
            )
            if existing:
                raise DuplicateUsernameError(user.username)
            self.db.add(user_to_model(user))
            self.db.commit()
        except IntegrityError as e:
            # Two inserts raced past the existence check; the unique index wins
            self.db.rollback()
            raise DuplicateUsernameError(user.username) from e
        except SQLAlchemyError as e:
            raise self._fail("add user", e) from e
        logger.info("Inserted user: %s", user.username)

    def _update_strikes(self, username: str, value, action: str, *criteria) -> bool:
        try:
            matched = (
                self.db.query(UserModel)
                .filter(UserModel.username == username, *criteria)
                .update({UserModel.strikes: value}, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(action, e) from e
        # Cached instances must not serve the stale counter
        self.db.expire_all()
        return matched > 0

    def set_strikes(self, username: str, value: int) -> bool:
        if value < 0:
            raise ValueError("strikes cannot be negative")
        return self._update_strikes(username, value, "set strikes")

    def increment_strikes(self, username: str) -> bool:
        return self._update_strikes(
            username, UserModel.strikes + 1, "increment strikes"
        )

    def reset_strikes_below(self, username: str, threshold: int) -> bool:
        return self._update_strikes(
            username, 0, "reset strikes", UserModel.strikes < threshold
        )

    def delete(self, username: str) -> None:
        try:
            (
                self.db.query(UserModel)
                .filter(UserModel.username == username)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete user", e) from e

    def list_all(self) -> List[User]:
        try:
            models = self.db.query(UserModel).order_by(UserModel.username).all()
        except SQLAlchemyError as e:
            raise self._fail("list users", e) from e
        return [model_to_user(m) for m in models]


class InMemoryUserStore(UserStore):
    """Thread-safe UserStore kept in a dictionary.

    Records are copied on the way in and out, so callers never share state
    with the store.
    """

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._lock = threading.Lock()

    def find_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(username)
            return copy.deepcopy(user) if user else None

    def insert(self, user: User) -> None:
        with self._lock:
            if user.username in self._users:
                raise DuplicateUsernameError(user.username)
            self._users[user.username] = copy.deepcopy(user)

    def set_strikes(self, username: str, value: int) -> bool:
        if value < 0:
            raise ValueError("strikes cannot be negative")
        with self._lock:
            user = self._users.get(username)
            if user is None:
                return False
            self._users[username] = user.model_copy(update={"strikes": value})
            return True

    def increment_strikes(self, username: str) -> bool:
        with self._lock:
            user = self._users.get(username)
            if user is None:
                return False
            self._users[username] = user.model_copy(
                update={"strikes": user.strikes + 1}
            )
            return True

    def reset_strikes_below(self, username: str, threshold: int) -> bool:
        with self._lock:
            user = self._users.get(username)
            if user is None or user.strikes >= threshold:
                return False
            self._users[username] = user.model_copy(update={"strikes": 0})
            return True

    def delete(self, username: str) -> None:
        with self._lock:
            self._users.pop(username, None)

    def list_all(self) -> List[User]:
        with self._lock:
            return [copy.deepcopy(self._users[name]) for name in sorted(self._users)]
