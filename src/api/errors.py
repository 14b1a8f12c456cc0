"""Translation of account errors into HTTP errors."""

from fastapi import HTTPException, status

from core.exceptions import ErrorKind, UserAlreadyExistsError, UserNotFoundError, UserReqError

_STATUS_BY_KIND = {
    ErrorKind.INVALID_DETAILS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.ACCOUNT_LOCKED: status.HTTP_423_LOCKED,
    ErrorKind.CONNECTION_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.ADD_USER_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STRIKE_ADD_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.STRIKE_RESET_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.DELETE_USER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.FETCH_USERS_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_http_exception(error: UserReqError) -> HTTPException:
    """Build the HTTPException for an account error.

    The body keeps both the kind and the display message:
    ``{"detail": {"kind": ..., "message": ...}}``.
    """
    if isinstance(error, UserNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, UserAlreadyExistsError):
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = _STATUS_BY_KIND.get(
            error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    return HTTPException(status_code=status_code, detail=error.to_dict())
