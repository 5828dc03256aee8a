from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    InactiveUserException,
    InsufficientPermissionsException,
    TokenExpiredException,
)
from repositories.database import get_db
from repositories.user_repository import UserRepository

bearer_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token whose only claims are the user id and the expiry."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> schemas.TokenData:
    """
    Decode a bearer token.

    Raises:
        TokenExpiredException: If the token signature has expired.
        AuthenticationException: If the token is malformed or badly signed.
    """
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.exceptions.ExpiredSignatureError:
        raise TokenExpiredException()
    except jwt.exceptions.InvalidTokenError:
        raise AuthenticationException("Not authorized, token failed")

    subject = payload.get("sub")
    try:
        return schemas.TokenData(user_id=int(subject))
    except (TypeError, ValueError):
        raise AuthenticationException("Not authorized, token failed")


def authenticate_user(db: Session, email: str, password: str) -> db_models.User | None:
    user = UserRepository(db).get_by_email(email)
    if not user:
        return None
    if not verify_password(password, str(user.hashed_password)):
        return None
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> db_models.User:
    """
    Get the authenticated user from the bearer token.

    Raises:
        AuthenticationException: If the token is missing or invalid, or the
            user no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationException("Not authorized, no token provided")

    token_data = decode_access_token(credentials.credentials)
    user = UserRepository(db).get_by_id(token_data.user_id)
    if user is None:
        raise AuthenticationException("User not found, token invalid")
    return user


async def get_current_active_user(
    current_user: db_models.User = Depends(get_current_user),
) -> db_models.User:
    """
    Get the current user and make sure the account may act.

    Raises:
        InactiveUserException: If the account is banned or suspended.
    """
    if bool(current_user.is_banned):
        raise InactiveUserException("Account has been banned")
    if bool(current_user.is_suspended):
        raise InactiveUserException("Account is suspended")
    return current_user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[db_models.User]:
    """
    Get current user if authenticated, otherwise return None.

    Malformed or expired tokens are treated as anonymous access.
    """
    if credentials is None:
        return None
    try:
        token_data = decode_access_token(credentials.credentials)
    except AuthenticationException:
        return None
    return UserRepository(db).get_by_id(token_data.user_id)


async def get_admin_user(
    current_user: db_models.User = Depends(get_current_active_user),
) -> db_models.User:
    """
    Require admin permissions.

    Raises:
        InsufficientPermissionsException: If user is not an admin.
    """
    if not bool(current_user.is_admin):
        raise InsufficientPermissionsException("Forbidden: Admin access required")
    return current_user
