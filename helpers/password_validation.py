"""
Password strength validation used by the password reset flow.
"""

import re
from dataclasses import dataclass
from typing import List

WEAK_PASSWORD_MESSAGE = (
    "Password must be at least 8 characters long and contain uppercase, "
    "lowercase, number and special character"
)


@dataclass
class PasswordRequirements:
    """Password strength requirements."""

    min_length: int = 8
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_digit: bool = True
    require_special: bool = True
    special_characters: str = "@$!%*?&"
    # Reject characters outside letters, digits and the special set
    restrict_charset: bool = True


DEFAULT_REQUIREMENTS = PasswordRequirements()


def validate_password_strength(
    password: str | None,
    requirements: PasswordRequirements = DEFAULT_REQUIREMENTS,
) -> tuple[bool, List[str]]:
    """
    Validate a password against the strength requirements.

    Args:
        password: Candidate password (None counts as empty)
        requirements: Requirements to check against

    Returns:
        Tuple of (is_valid, list of failed rules)
    """
    password = password or ""
    errors: List[str] = []
    special = re.escape(requirements.special_characters)

    if len(password) < requirements.min_length:
        errors.append(
            f"Password must be at least {requirements.min_length} characters long"
        )
    if requirements.require_uppercase and not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if requirements.require_lowercase and not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if requirements.require_digit and not re.search(r"\d", password):
        errors.append("Password must contain at least one digit")
    if requirements.require_special and not re.search(f"[{special}]", password):
        errors.append("Password must contain at least one special character")
    if requirements.restrict_charset and re.search(
        f"[^A-Za-z0-9{special}]", password
    ):
        errors.append("Password contains unsupported characters")

    return len(errors) == 0, errors


def is_strong_password(password: str | None) -> bool:
    is_valid, _ = validate_password_strength(password)
    return is_valid
