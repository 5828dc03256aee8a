"""Authentication router endpoints."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.rate_limiter import LOGIN_LIMIT, PASSWORD_RESET_LIMIT, REGISTER_LIMIT, limiter
from helpers.responses import api_response
from repositories.database import get_db
from services.auth_service import AuthService
from services.password_reset_service import GENERIC_RESET_MESSAGE, PasswordResetService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
def register(
    request: Request,
    payload: schemas.RegisterRequest,
    db: Session = Depends(get_db),
) -> dict:
    """
    Register a new user and email a verification link.

    Rate limited to 5 per minute.
    """
    user, token = AuthService.register(
        db, payload.username, payload.email, payload.password
    )
    return api_response(
        {"token": token, "user": schemas.AuthUser.model_validate(user)},
        "User registered successfully! Please check your email to verify your account.",
    )


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
def login(
    request: Request,
    payload: schemas.LoginRequest,
    db: Session = Depends(get_db),
) -> dict:
    """
    Login with email and password. Rate limited to 10 per minute.

    Domain exceptions are caught by centralized exception handlers.
    """
    user, token = AuthService.login(db, payload.email, payload.password)
    return api_response(
        {"token": token, "user": schemas.AuthUserWithProfile.model_validate(user)},
        "Login successful",
    )


@router.get("/verify/{token}")
def verify_email(token: str, db: Session = Depends(get_db)) -> dict:
    """Confirm an email address from the emailed link."""
    AuthService.verify_email(db, token)
    return api_response(
        message="Email verified successfully! You can now use all features of the app."
    )


@router.post("/resend-verification")
def resend_verification(
    payload: schemas.EmailRequest, db: Session = Depends(get_db)
) -> dict:
    AuthService.resend_verification(db, payload.email)
    return api_response(
        message=(
            "Verification email sent successfully! Please check your email inbox "
            "and spam folder."
        )
    )


@router.get("/me")
async def read_users_me(
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> dict:
    """Get current user."""
    return api_response({"user": schemas.UserPrivate.model_validate(current_user)})


@router.put("/profile")
def update_profile(
    payload: schemas.AuthProfileUpdate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    """Update bio, location and website."""
    user = AuthService.update_profile(
        db, current_user, payload.bio, payload.location, payload.website
    )
    return api_response(
        {"user": schemas.UserPrivate.model_validate(user)},
        "Profile updated successfully",
    )


@router.post("/forgot-password")
@limiter.limit(PASSWORD_RESET_LIMIT)
def forgot_password(
    request: Request,
    payload: schemas.EmailRequest,
    db: Session = Depends(get_db),
) -> dict:
    """
    Request a password reset email.

    Always answers with the same message so accounts cannot be enumerated.
    """
    PasswordResetService.request_reset(db, payload.email)
    return api_response(message=GENERIC_RESET_MESSAGE)


@router.post("/reset-password/{token}")
@limiter.limit(PASSWORD_RESET_LIMIT)
def reset_password(
    request: Request,
    token: str,
    payload: schemas.PasswordResetRequest,
    db: Session = Depends(get_db),
) -> dict:
    """Set a new password with a reset token and sign the user in."""
    user, access_token = PasswordResetService.reset_password(
        db, token, payload.password
    )
    return api_response(
        {"token": access_token, "user": schemas.AuthUser.model_validate(user)},
        "Password has been reset successfully",
    )
