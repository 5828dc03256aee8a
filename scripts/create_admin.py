#!/usr/bin/env python
"""
Create (or promote) an administrator account.

Admin accounts are never created through the public API. Run this once per
deployment:

    python -m scripts.create_admin --email admin@example.com \
        --username admin --password 'S3cure!pass'

If an account with that email already exists it is promoted and verified
instead, so the command is safe to re-run.
"""

import argparse
import sys
from pathlib import Path

# Add the project root to the path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

import repositories.db_models as db_models  # noqa: E402
from authentication.auth import get_password_hash  # noqa: E402
from helpers.password_validation import validate_password_strength  # noqa: E402
from helpers.time_utils import utc_now  # noqa: E402
from models.exceptions import UserAlreadyExistsException, ValidationException  # noqa: E402
from repositories.database import SessionLocal  # noqa: E402
from repositories.user_repository import UserRepository  # noqa: E402


def create_admin(
    db: Session, email: str, username: str, password: str
) -> tuple[db_models.User, bool]:
    """
    Create a verified admin, or promote the account already using ``email``.

    Returns:
        Tuple of (admin user, whether a new account was created)

    Raises:
        ValidationException: If the password is weak
        UserAlreadyExistsException: If the username belongs to another account
    """
    user_repo = UserRepository(db)
    existing = user_repo.get_by_email(email)
    if existing:
        existing.is_admin = True
        if not existing.is_verified:
            existing.is_verified = True
            existing.email_verified_at = utc_now()
        user_repo.commit()
        logger.info(f"Promoted existing user {existing.id} to admin")
        return existing, False

    is_valid, errors = validate_password_strength(password)
    if not is_valid:
        raise ValidationException("; ".join(errors))
    if user_repo.get_by_username(username):
        raise UserAlreadyExistsException("Username already taken")

    admin = user_repo.create(
        db_models.User(
            username=username,
            email=email,
            hashed_password=get_password_hash(password),
            is_admin=True,
            is_verified=True,
            email_verified_at=utc_now(),
        )
    )
    logger.info(f"Admin account created: id={admin.id} username={admin.username}")
    return admin, True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--username", default="admin", help="Username (default: admin)")
    parser.add_argument("--password", required=True, help="Initial password")
    args = parser.parse_args(argv)

    db: Session = SessionLocal()
    try:
        _, created = create_admin(
            db, args.email.strip().lower(), args.username, args.password
        )
        logger.info("Admin created" if created else "Existing account promoted")
        return 0
    except (ValidationException, UserAlreadyExistsException) as e:
        logger.error(f"Could not create admin: {e.message}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
