"""Account authentication and administration.

This module holds the login/lockout state machine and the administrative
account operations. ``AuthService`` keeps no state between calls; everything
it decides on lives in the stored user record.

An account is locked once its strike counter reaches the lock threshold. Only
an administrator unlock resets a locked account; login attempts against it
fail with ``AccountLockedError`` and leave the counter untouched.

Storage failures never leave this module raw. Each one is converted into the
``UserReqError`` subclass matching the operation that failed.
"""

import logging
from datetime import date
from typing import Callable, List, Optional

import config
from core.exceptions import (
    AccountLockedError,
    AddUserError,
    DeleteUserError,
    DuplicateUsernameError,
    FetchUsersError,
    InvalidDetailsError,
    StorageError,
    StoreConnectionError,
    StrikeAddError,
    StrikeResetError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from schemas.user import AccessLevel, User
from utils.passwords import burn_password_check, hash_password, verify_password
from utils.review_store import ReviewStore
from utils.user_store import UserStore

logger = logging.getLogger(__name__)


class AuthService:
    """Validates logins and manages accounts on top of a UserStore."""

    def __init__(
        self,
        store: UserStore,
        review_store: Optional[ReviewStore] = None,
        lock_threshold: int = None,
        strike_write_attempts: int = None,
        strict_strike_writes: bool = None,
    ):
        """Initialize AuthService.

        Args:
            store: Storage of user records.
            review_store: Storage of quiz reviews, cleared on account deletion.
            lock_threshold: Strikes at which an account locks.
                Defaults to config.LOCK_THRESHOLD.
            strike_write_attempts: Attempts made for each strike counter write.
                Defaults to config.STRIKE_WRITE_ATTEMPTS.
            strict_strike_writes: Raise strike write failures to the caller
                instead of only logging them. Defaults to
                config.STRICT_STRIKE_WRITES.
        """
        self.store = store
        self.review_store = review_store
        self.lock_threshold = (
            config.LOCK_THRESHOLD if lock_threshold is None else lock_threshold
        )
        attempts = (
            config.STRIKE_WRITE_ATTEMPTS
            if strike_write_attempts is None
            else strike_write_attempts
        )
        self.strike_write_attempts = max(1, attempts)
        self.strict_strike_writes = (
            config.STRICT_STRIKE_WRITES
            if strict_strike_writes is None
            else strict_strike_writes
        )

    def is_locked(self, user: User) -> bool:
        return user.strikes >= self.lock_threshold

    def _lookup(self, username: str) -> Optional[User]:
        try:
            return self.store.find_by_username(username)
        except StorageError as e:
            raise StoreConnectionError() from e

    def get_user(self, username: str) -> User:
        """Fetch an existing account.

        Raises:
            StoreConnectionError: If the user store could not be read.
            UserNotFoundError: If there is no such account.
        """
        user = self._lookup(username)
        if user is None:
            raise UserNotFoundError(username)
        return user

    def _write_strikes(
        self,
        write: Callable[[str], bool],
        username: str,
        error_cls: type,
    ) -> bool:
        """Run a strike counter write, retrying on storage failure.

        Raises:
            StrikeAddError or StrikeResetError (``error_cls``) once every
            attempt has failed.
        """
        last_error = None
        for attempt in range(1, self.strike_write_attempts + 1):
            try:
                return write(username)
            except StorageError as e:
                last_error = e
                logger.warning(
                    "Strike write for %s failed (attempt %d/%d)",
                    username,
                    attempt,
                    self.strike_write_attempts,
                )
        logger.error(
            "Giving up on strike write for %s; lockout accounting may be stale",
            username,
            exc_info=last_error,
        )
        raise error_cls() from last_error

    def validate_login(self, username: str, password: str) -> User:
        """Check a login attempt and update the account's strike counter.

        Args:
            username: Username supplied by the caller.
            password: Plain text password supplied by the caller.

        Returns:
            The authenticated User, with its strike counter reset.

        Raises:
            StoreConnectionError: If the user store could not be read.
            InvalidDetailsError: If the username is unknown or the password is
                wrong. Both cases carry the same message.
            AccountLockedError: If the account is locked, whatever the password.
            StrikeResetError, StrikeAddError: Only with strict strike writes,
                when the counter could not be written.
        """
        user = self._lookup(username)
        if user is None:
            burn_password_check(password)
            logger.info("Login attempt for unknown user: %s", username)
            raise InvalidDetailsError()

        if self.is_locked(user):
            logger.warning("Login attempt on locked account: %s", username)
            raise AccountLockedError()

        if verify_password(password, user.password_hash):
            try:
                matched = self._write_strikes(
                    lambda name: self.store.reset_strikes_below(
                        name, self.lock_threshold
                    ),
                    username,
                    StrikeResetError,
                )
            except StrikeResetError:
                if self.strict_strike_writes:
                    raise
                # The password was right; only the bookkeeping failed
                logger.info("User logged in without strike reset: %s", username)
                return user
            if not matched:
                # Locked or deleted since it was read
                current = self._lookup(username)
                if current is not None and self.is_locked(current):
                    logger.warning("Account locked during login: %s", username)
                    raise AccountLockedError()
                logger.warning("User vanished during login: %s", username)
                raise InvalidDetailsError()
            logger.info("User logged in: %s", username)
            return user.model_copy(update={"strikes": 0})

        try:
            matched = self._write_strikes(
                self.store.increment_strikes, username, StrikeAddError
            )
        except StrikeAddError as e:
            if self.strict_strike_writes:
                raise
            raise InvalidDetailsError() from e
        if matched:
            strikes = user.strikes + 1
            if strikes >= self.lock_threshold:
                logger.warning(
                    "Account locked after %d failed logins: %s", strikes, username
                )
            else:
                logger.warning(
                    "Failed login for %s (%d/%d)",
                    username,
                    strikes,
                    self.lock_threshold,
                )
        raise InvalidDetailsError()

    def add_user(
        self,
        username: str,
        password: str,
        date_of_birth: date,
        access_level: AccessLevel = AccessLevel.USER,
    ) -> User:
        """Create a new account with no strikes.

        Returns:
            The created User.

        Raises:
            UserAlreadyExistsError: If the username is taken.
            AddUserError: If the record could not be written.
        """
        user = User(
            username=username,
            password_hash=hash_password(password),
            date_of_birth=date_of_birth,
            access_level=access_level,
            strikes=0,
        )
        try:
            self.store.insert(user)
        except DuplicateUsernameError as e:
            raise UserAlreadyExistsError(username) from e
        except StorageError as e:
            raise AddUserError() from e
        logger.info("Created %s account: %s", access_level.value, username)
        return user

    def list_users(self) -> List[User]:
        """Return every account.

        Raises:
            FetchUsersError: If the user store could not be read.
        """
        try:
            return self.store.list_all()
        except StorageError as e:
            raise FetchUsersError() from e

    def unlock_user(self, username: str) -> None:
        """Reset an account's strike counter.

        Unlocking an account that is not locked is a no-op success.

        Raises:
            StoreConnectionError: If the user store could not be read.
            UserNotFoundError: If there is no such account.
            StrikeResetError: If the counter could not be written.
        """
        if self._lookup(username) is None:
            raise UserNotFoundError(username)
        matched = self._write_strikes(
            lambda name: self.store.set_strikes(name, 0),
            username,
            StrikeResetError,
        )
        if not matched:
            raise UserNotFoundError(username)
        logger.info("Unlocked account: %s", username)

    def delete_user(self, username: str) -> None:
        """Delete an account and the quiz reviews that reference it.

        Raises:
            StoreConnectionError: If the user store could not be read.
            UserNotFoundError: If there is no such account.
            DeleteUserError: If the reviews or the account could not be removed.
        """
        if self._lookup(username) is None:
            raise UserNotFoundError(username)
        try:
            if self.review_store is not None:
                self.review_store.delete_for_user(username)
            self.store.delete(username)
        except StorageError as e:
            raise DeleteUserError() from e
        logger.info("Deleted account: %s", username)
