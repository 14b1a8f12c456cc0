"""Custom exception classes for the quiz account service.

Every failure that reaches a caller of the account service is a
``UserReqError``: it carries a programmatic ``kind`` for branching and a
display-ready ``message`` meant to be shown verbatim in a UI dialog.

``StorageError`` is internal to the storage layer. It never crosses the
``AuthService`` boundary; the service converts it into the ``UserReqError``
matching the operation that failed.
"""

from enum import Enum
from typing import Dict


class ErrorKind(str, Enum):
    """Classification of account request failures."""

    INVALID_DETAILS = "InvalidDetails"
    ACCOUNT_LOCKED = "AccountLocked"
    CONNECTION_ERROR = "ConnectionError"
    ADD_USER_ERROR = "AddUserError"
    STRIKE_ADD_ERROR = "StrikeAddError"
    STRIKE_RESET_ERROR = "StrikeResetError"
    DELETE_USER_ERROR = "DeleteUserError"
    FETCH_USERS_ERROR = "FetchUsersError"


class UserReqError(Exception):
    """Base exception for all account request failures."""

    kind: ErrorKind = ErrorKind.INVALID_DETAILS
    default_message: str = "The request could not be completed."

    def __init__(self, message: str = None):
        """Initialize the exception.

        Args:
            message: Display-ready message. Defaults to the class message.
        """
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    def to_dict(self) -> Dict[str, str]:
        """Serialize the error for transport to the front-end."""
        return {"kind": self.kind.value, "message": self.message}


class InvalidDetailsError(UserReqError):
    """Raised for bad credentials or a missing account."""

    kind = ErrorKind.INVALID_DETAILS
    default_message = "The username or password was incorrect."


class UserNotFoundError(InvalidDetailsError):
    """Raised when an administrative operation targets a missing account."""

    default_message = "Could not find user."

    def __init__(self, username: str):
        """Initialize the exception.

        Args:
            username: The username that was not found.
        """
        self.username = username
        super().__init__()


class AccountLockedError(UserReqError):
    """Raised when the account has reached the lockout threshold."""

    kind = ErrorKind.ACCOUNT_LOCKED
    default_message = "This account is locked. Ask an administrator to unlock it."


class StoreConnectionError(UserReqError):
    """Raised when the user store cannot be reached."""

    kind = ErrorKind.CONNECTION_ERROR
    default_message = "Could not fetch user."


class AddUserError(UserReqError):
    """Raised when a user record cannot be created."""

    kind = ErrorKind.ADD_USER_ERROR
    default_message = "Could not add user object to database."


class UserAlreadyExistsError(AddUserError):
    """Raised when creating a user whose username is taken."""

    def __init__(self, username: str):
        """Initialize the exception.

        Args:
            username: The username that already exists.
        """
        self.username = username
        super().__init__(f"The username '{username}' is already taken.")


class StrikeAddError(UserReqError):
    """Raised when a failed login could not be recorded."""

    kind = ErrorKind.STRIKE_ADD_ERROR
    default_message = "Could not record the failed login attempt."


class StrikeResetError(UserReqError):
    """Raised when a strike counter could not be reset."""

    kind = ErrorKind.STRIKE_RESET_ERROR
    default_message = "Could not reset the login attempts for this account."


class DeleteUserError(UserReqError):
    """Raised when a user record cannot be removed."""

    kind = ErrorKind.DELETE_USER_ERROR
    default_message = "Could not delete user."


class FetchUsersError(UserReqError):
    """Raised when the user list cannot be read."""

    kind = ErrorKind.FETCH_USERS_ERROR
    default_message = "Could not fetch users."


class StorageError(Exception):
    """Raised by a store when the underlying storage operation fails."""

    pass


class DuplicateUsernameError(StorageError):
    """Raised by a store when inserting a username that already exists."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"User '{username}' already exists")
