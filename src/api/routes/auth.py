"""Authentication routes.

This module handles HTTP endpoints for login, registration and the current
user. Login failures keep the account service's error kind and message.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import pytz
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from api.errors import to_http_exception
from config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ADMIN_TOKEN,
    JWT_ALGORITHM,
    JWT_SECRET_KEY,
)
from core.dependencies import AuthServiceDep
from core.exceptions import (
    AccountLockedError,
    InvalidDetailsError,
    UserNotFoundError,
    UserReqError,
)
from schemas.user import (
    AccessLevel,
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    PublicUser,
    RegisterRequest,
    User,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# HTTP Bearer token security
security = HTTPBearer()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(pytz.utc) + expires_delta
    else:
        expire = datetime.now(pytz.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    """Verify JWT token from Authorization header.

    Args:
        credentials: HTTP Bearer token credentials.

    Returns:
        Decoded token payload.

    Raises:
        HTTPException: If token is invalid or expired.
    """
    try:
        payload = jwt.decode(
            credentials.credentials, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM]
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    if payload.get("sub") is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    return payload


def get_current_user(
    auth_service: AuthServiceDep,
    token_payload: dict = Depends(verify_token),
) -> User:
    """Get the user named by the bearer token.

    Raises:
        HTTPException: If the user no longer exists or is locked, or the
            store cannot be reached.
    """
    try:
        user = auth_service.get_user(token_payload["sub"])
    except UserNotFoundError:
        # A token for a deleted account is a credential problem, not a 404
        raise to_http_exception(InvalidDetailsError("User not found."))
    except UserReqError as e:
        raise to_http_exception(e)
    if auth_service.is_locked(user):
        raise to_http_exception(AccountLockedError())
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Allow only ADMIN accounts through."""
    if current_user.access_level != AccessLevel.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required.",
        )
    return current_user


@router.post("/login", response_model=LoginResponse, summary="User login")
def login(req: LoginRequest, auth_service: AuthServiceDep) -> LoginResponse:
    """Login with username and password.

    Args:
        req: Login request with username and password.
        auth_service: Injected AuthService instance.

    Returns:
        LoginResponse with user information and JWT token.

    Raises:
        HTTPException: 401 for bad details, 423 for a locked account, 503 if
            the user store is unreachable.
    """
    try:
        user = auth_service.validate_login(req.username, req.password)
    except UserReqError as e:
        raise to_http_exception(e)

    token = create_access_token(
        data={"sub": user.username, "access_level": user.access_level.value},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return LoginResponse(user=user.to_public(), token=token)


@router.post(
    "/register",
    response_model=PublicUser,
    status_code=status.HTTP_201_CREATED,
    summary="User registration",
)
def register(req: RegisterRequest, auth_service: AuthServiceDep) -> PublicUser:
    """Register a new account.

    Registration requirements:
    - USER: open registration
    - TEACHER/ADMIN: requires ADMIN_TOKEN from environment variable

    Raises:
        HTTPException: If the admin token is missing or wrong, or the account
            could not be created.
    """
    if req.access_level != AccessLevel.USER:
        if not ADMIN_TOKEN:
            logger.error("ADMIN_TOKEN is not set in environment variables")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Privileged registration is not configured.",
            )
        if req.admin_token != ADMIN_TOKEN:
            logger.warning(
                "Rejected %s registration with bad admin token: %s",
                req.access_level.value,
                req.username,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid admin token",
            )

    try:
        user = auth_service.add_user(
            username=req.username,
            password=req.password,
            date_of_birth=req.date_of_birth,
            access_level=req.access_level,
        )
    except UserReqError as e:
        raise to_http_exception(e)
    return user.to_public()


@router.get("/me", response_model=CurrentUserResponse, summary="Current user")
def get_current_user_info(
    current_user: User = Depends(get_current_user),
) -> CurrentUserResponse:
    """Get current authenticated user information."""
    return CurrentUserResponse(user=current_user.to_public())
