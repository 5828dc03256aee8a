"""Tests for the application settings."""

import pytest
from pydantic import ValidationError

from models.config import Settings


class TestSettings:
    def test_jwt_secret_is_required(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET", raising=False)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("http://a.test", ["http://a.test"]),
            ("http://a.test, http://b.test", ["http://a.test", "http://b.test"]),
            ('["http://a.test", "http://c.test"]', ["http://a.test", "http://c.test"]),
        ],
    )
    def test_cors_origins_from_env(self, monkeypatch, raw, expected):
        monkeypatch.setenv("CORS_ORIGINS", raw)

        assert Settings(_env_file=None).CORS_ORIGINS == expected

    def test_unknown_upload_backend(self, monkeypatch):
        monkeypatch.setenv("UPLOAD_BACKEND", "ftp")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_derived_flags(self):
        settings = Settings(
            _env_file=None, ENVIRONMENT="production", GEMINI_API_KEY="key"
        )

        assert settings.is_production is True
        assert settings.ai_configured is True
        assert Settings(_env_file=None).ai_configured is False
