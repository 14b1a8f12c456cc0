"""Account administration routes.

Every endpoint here requires a bearer token of an ADMIN account.
"""

import logging

from fastapi import APIRouter, Depends, status

from api.errors import to_http_exception
from api.routes.auth import require_admin
from core.dependencies import AuthServiceDep
from core.exceptions import UserReqError
from schemas.user import AddUserRequest, PublicUser, User, UserListResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/users", response_model=UserListResponse, summary="List accounts")
def list_users(
    auth_service: AuthServiceDep,
    admin: User = Depends(require_admin),
) -> UserListResponse:
    try:
        users = auth_service.list_users()
    except UserReqError as e:
        raise to_http_exception(e)
    return UserListResponse(users=[u.to_public() for u in users])


@router.post(
    "/users",
    response_model=PublicUser,
    status_code=status.HTTP_201_CREATED,
    summary="Add an account",
)
def add_user(
    req: AddUserRequest,
    auth_service: AuthServiceDep,
    admin: User = Depends(require_admin),
) -> PublicUser:
    """Create an account of any access level."""
    try:
        user = auth_service.add_user(
            username=req.username,
            password=req.password,
            date_of_birth=req.date_of_birth,
            access_level=req.access_level,
        )
    except UserReqError as e:
        raise to_http_exception(e)
    logger.info("%s added account %s", admin.username, user.username)
    return user.to_public()


@router.post("/users/{username}/unlock", summary="Unlock an account")
def unlock_user(
    username: str,
    auth_service: AuthServiceDep,
    admin: User = Depends(require_admin),
) -> dict:
    """Reset the failed login counter of an account.

    Raises:
        HTTPException: 404 if the account does not exist.
    """
    try:
        auth_service.unlock_user(username)
    except UserReqError as e:
        raise to_http_exception(e)
    logger.info("%s unlocked account %s", admin.username, username)
    return {"success": True, "message": f"Unlocked '{username}'"}


@router.delete("/users/{username}", summary="Delete an account")
def delete_user(
    username: str,
    auth_service: AuthServiceDep,
    admin: User = Depends(require_admin),
) -> dict:
    """Delete an account together with its quiz reviews.

    Raises:
        HTTPException: 404 if the account does not exist.
    """
    try:
        auth_service.delete_user(username)
    except UserReqError as e:
        raise to_http_exception(e)
    logger.info("%s deleted account %s", admin.username, username)
    return {"success": True, "message": f"Deleted '{username}'"}
