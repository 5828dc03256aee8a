"""Tests for password strength validation."""

import pytest

from helpers.password_validation import (
    PasswordRequirements,
    is_strong_password,
    validate_password_strength,
)


class TestValidatePasswordStrength:
    def test_strong_password(self):
        assert validate_password_strength("Answer42!") == (True, [])

    @pytest.mark.parametrize(
        "password, failed_rule",
        [
            ("Ab1!", "at least 8 characters"),
            ("answer42!", "uppercase"),
            ("ANSWER42!", "lowercase"),
            ("Answerxx!", "digit"),
            ("Answer42x", "special character"),
            ("Answer 42!", "unsupported characters"),
            ("Answer42#", "special character"),
        ],
    )
    def test_failed_rules(self, password, failed_rule):
        is_valid, errors = validate_password_strength(password)

        assert is_valid is False
        assert any(failed_rule in error for error in errors)

    def test_none_fails_every_rule(self):
        _, errors = validate_password_strength(None)

        assert len(errors) == 5

    def test_custom_requirements(self):
        relaxed = PasswordRequirements(
            min_length=4, require_special=False, restrict_charset=False
        )

        assert validate_password_strength("Ab1 ", relaxed) == (True, [])

    def test_shortcut(self):
        assert is_strong_password("Secret123!")
        assert not is_strong_password("secret")
