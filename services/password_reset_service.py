"""
Password reset flow.

The raw token only ever travels by email; the database keeps its sha256 hex
digest with an expiry, so a leaked table cannot be replayed.
"""

import hashlib
import secrets
from datetime import timedelta

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from authentication.auth import create_access_token, get_password_hash
from helpers.password_validation import WEAK_PASSWORD_MESSAGE, is_strong_password
from helpers.time_utils import utc_now
from models.config import settings
from models.exceptions import ValidationException
from repositories.user_repository import UserRepository
from services.email_service import EmailService

GENERIC_RESET_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)


class PasswordResetService:
    """Service for the two-step password reset."""

    @staticmethod
    def _hash_email_for_logging(email: str) -> str:
        """Hash email for logging (never log full addresses)."""
        return hashlib.sha256(email.lower().encode()).hexdigest()[:16]

    @staticmethod
    def hash_token(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    @staticmethod
    def issue_reset_token(db: Session, user: db_models.User) -> str:
        """
        Store a fresh reset token hash on the user and email the raw token.

        Returns:
            The raw token
        """
        token = secrets.token_hex(32)
        user.reset_password_token = PasswordResetService.hash_token(token)
        user.reset_password_expires = utc_now() + timedelta(
            minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES
        )
        UserRepository(db).commit()

        if not EmailService.send_password_reset_email(user.email, token):
            logger.warning(f"Password reset email to user {user.id} could not be sent")
        return token

    @staticmethod
    def request_reset(db: Session, email: str | None) -> None:
        """
        Start a reset for the account using this email, if there is one.

        Unknown addresses are ignored silently so the response never reveals
        whether an account exists.
        """
        if not email:
            return
        user = UserRepository(db).get_by_email(email)
        if not user:
            logger.info(
                "Password reset requested for unknown email "
                f"{PasswordResetService._hash_email_for_logging(email)}"
            )
            return
        PasswordResetService.issue_reset_token(db, user)
        logger.info(f"Password reset token issued for user {user.id}")

    @staticmethod
    def reset_password(
        db: Session, token: str, new_password: str | None
    ) -> tuple[db_models.User, str]:
        """
        Replace the password of the account holding an unexpired token.

        Returns:
            Tuple of (user, new access token)

        Raises:
            ValidationException: If the password is weak or the token is
                unknown or expired
        """
        if not is_strong_password(new_password):
            raise ValidationException(WEAK_PASSWORD_MESSAGE)

        user_repo = UserRepository(db)
        user = user_repo.get_by_reset_token_hash(
            PasswordResetService.hash_token(token), utc_now()
        )
        if not user:
            raise ValidationException("Password reset token is invalid or has expired")

        user.hashed_password = get_password_hash(str(new_password))
        user.reset_password_token = None
        user.reset_password_expires = None
        user = user_repo.update(user)
        logger.info(f"Password reset completed for user {user.id}")

        if not EmailService.send_password_changed_notification(user.email):
            logger.warning(f"Password change notice to user {user.id} not sent")

        return user, create_access_token(user.id)
