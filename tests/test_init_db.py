"""Tests for database initialization."""

import pytest

import init_db as init_db_module
import repositories.db_models as db_models
from models.config import settings


@pytest.fixture
def test_database(db_session, monkeypatch):
    """Point init_db at the test engine and session."""
    monkeypatch.setattr(init_db_module, "engine", db_session.get_bind())
    monkeypatch.setattr(init_db_module, "SessionLocal", lambda: db_session)
    return db_session


class TestInitDb:
    def test_without_admin_settings(self, test_database, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_EMAIL", None)
        monkeypatch.setattr(settings, "ADMIN_PASSWORD", None)

        assert init_db_module.init_db() is True
        assert test_database.query(db_models.User).count() == 0

    def test_bootstraps_admin(self, test_database, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_EMAIL", " Boss@Example.com ")
        monkeypatch.setattr(settings, "ADMIN_PASSWORD", "Admin123!")

        assert init_db_module.init_db() is True

        admin = test_database.query(db_models.User).one()
        assert admin.email == "boss@example.com"
        assert admin.username == "admin"
        assert admin.is_admin is True

    def test_is_idempotent(self, test_database, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_EMAIL", "boss@example.com")
        monkeypatch.setattr(settings, "ADMIN_PASSWORD", "Admin123!")

        assert init_db_module.init_db() is True
        assert init_db_module.init_db() is True
        assert test_database.query(db_models.User).count() == 1

    def test_weak_admin_password_reported(self, test_database, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_EMAIL", "boss@example.com")
        monkeypatch.setattr(settings, "ADMIN_PASSWORD", "weak")

        assert init_db_module.init_db() is False
