"""
Authentication Service

Handles registration, login, email verification and the auth profile update.
"""

import secrets
from datetime import timedelta

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from authentication.auth import (
    authenticate_user,
    create_access_token,
    get_password_hash,
)
from helpers.sanitization import sanitize_fields
from helpers.time_utils import is_expired, utc_now
from models.config import settings
from models.exceptions import (
    EmailNotVerifiedException,
    InactiveUserException,
    InvalidCredentialsException,
    NotFoundException,
    ServiceUnavailableException,
    UserAlreadyExistsException,
    ValidationException,
)
from repositories.user_repository import UserRepository
from services.email_service import EmailService


class AuthService:
    """Service for authentication business logic."""

    @staticmethod
    def _new_verification_token(user: db_models.User) -> str:
        token = secrets.token_hex(32)
        user.verification_token = token
        user.verification_token_expires = utc_now() + timedelta(
            hours=settings.VERIFICATION_TOKEN_EXPIRE_HOURS
        )
        return token

    @staticmethod
    def _duplicate_message(
        existing: db_models.User, email: str, username: str
    ) -> str:
        if existing.email == email and existing.username == username:
            if existing.is_verified:
                return (
                    "Account already exists with this email and username. "
                    "Please login instead."
                )
            return "Account already exists but email is not verified."
        if existing.email == email:
            return "Email already registered"
        return "Username already taken"

    @staticmethod
    def register(
        db: Session,
        username: str | None,
        email: str | None,
        password: str | None,
    ) -> tuple[db_models.User, str]:
        """
        Create an unverified account and send the verification email.

        Returns:
            Tuple of (created user, access token)

        Raises:
            ValidationException: If a field is missing
            UserAlreadyExistsException: If the email or username is taken
        """
        if not username or not email or not password:
            raise ValidationException("Please provide username, email, and password")

        user_repo = UserRepository(db)
        existing = user_repo.get_by_email_or_username(email, username)
        if existing:
            raise UserAlreadyExistsException(
                AuthService._duplicate_message(existing, email, username)
            )

        user = db_models.User(
            username=username,
            email=email,
            hashed_password=get_password_hash(password),
            is_verified=False,
        )
        token = AuthService._new_verification_token(user)
        user = user_repo.create(user)
        logger.info(f"User registered: id={user.id} username={user.username}")

        if not EmailService.send_verification_email(user.email, user.username, token):
            # Registration stands even when the email cannot be delivered
            logger.warning(f"Verification email to user {user.id} could not be sent")

        return user, create_access_token(user.id)

    @staticmethod
    def login(
        db: Session, email: str | None, password: str | None
    ) -> tuple[db_models.User, str]:
        """
        Authenticate a user and create an access token.

        Raises:
            ValidationException: If email or password is missing
            InvalidCredentialsException: If email or password is incorrect
            EmailNotVerifiedException: If the email is not verified yet
            InactiveUserException: If the account is banned
        """
        if not email or not password:
            raise ValidationException("Please provide email and password")

        user = authenticate_user(db, email, password)
        if not user:
            raise InvalidCredentialsException()
        if not user.is_verified:
            raise EmailNotVerifiedException()
        if user.is_banned:
            raise InactiveUserException("Account has been banned")

        logger.info(f"User logged in: id={user.id}")
        return user, create_access_token(user.id)

    @staticmethod
    def verify_email(db: Session, token: str) -> db_models.User:
        """
        Mark the account holding an unexpired verification token as verified.

        Raises:
            ValidationException: If the token is unknown or expired
        """
        user_repo = UserRepository(db)
        user = user_repo.get_by_verification_token(token, utc_now())
        if not user:
            raise ValidationException("Invalid or expired verification token")

        user.is_verified = True
        user.email_verified_at = utc_now()
        user.verification_token = None
        user.verification_token_expires = None
        user = user_repo.update(user)
        logger.info(f"Email verified for user {user.id}")
        return user

    @staticmethod
    def resend_verification(db: Session, email: str | None) -> None:
        """
        Send the verification email again.

        The stored token is reused while it is still valid.

        Raises:
            ValidationException: If the email is missing or already verified
            NotFoundException: If no account uses this email
            ServiceUnavailableException: If the email cannot be sent
        """
        if not email:
            raise ValidationException("Please provide email address")

        user_repo = UserRepository(db)
        user = user_repo.get_by_email(email)
        if not user:
            raise NotFoundException("No account found with this email address")
        if user.is_verified:
            raise ValidationException(
                "This email address is already verified. You can login directly."
            )

        if not user.verification_token or is_expired(user.verification_token_expires):
            AuthService._new_verification_token(user)
            user = user_repo.update(user)

        sent = EmailService.send_verification_email(
            user.email, user.username, str(user.verification_token), resent=True
        )
        if not sent:
            logger.error(f"Resend verification failed for user {user.id}")
            raise ServiceUnavailableException(
                "Failed to send verification email. Please try again later."
            )

    @staticmethod
    def update_profile(
        db: Session,
        user: db_models.User,
        bio: str | None,
        location: str | None,
        website: str | None,
    ) -> db_models.User:
        """Update the short profile fields editable from the auth area."""
        for field, value in sanitize_fields(bio=bio, location=location).items():
            setattr(user, field, value)
        if website is not None:
            user.website = website.strip()
        return UserRepository(db).update(user)
