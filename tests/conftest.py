"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path for imports
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Set test environment variables before importing config
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["CORS_ORIGINS"] = "http://localhost:3000"
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["GEMINI_API_KEY"] = ""
os.environ["UPLOAD_BACKEND"] = "local"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="forum-uploads-")

from authentication.auth import create_access_token, get_password_hash  # noqa: E402
from repositories.database import Base, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402
import services.search  # noqa: E402, F401  (question search index DDL events)

TEST_PASSWORD = "Password123!"

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with overridden database dependency."""
    from helpers.rate_limiter import limiter
    from main import app

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(db_session, username: str, **overrides) -> db_models.User:
    fields = {
        "username": username,
        "email": f"{username}@example.com",
        "hashed_password": get_password_hash(TEST_PASSWORD),
        "is_verified": True,
    }
    fields.update(overrides)
    user = db_models.User(**fields)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def make_user(db_session):
    """Factory fixture for extra users."""

    def _factory(username: str, **overrides) -> db_models.User:
        return _make_user(db_session, username, **overrides)

    return _factory


@pytest.fixture
def test_user(db_session) -> db_models.User:
    """Verified regular user."""
    return _make_user(db_session, "testuser")


@pytest.fixture
def other_user(db_session) -> db_models.User:
    """Second verified user, for cross-user interactions."""
    return _make_user(db_session, "otheruser")


@pytest.fixture
def admin_user(db_session) -> db_models.User:
    """Verified administrator."""
    return _make_user(db_session, "adminuser", is_admin=True)


@pytest.fixture
def unverified_user(db_session) -> db_models.User:
    return _make_user(db_session, "pendinguser", is_verified=False)


@pytest.fixture
def test_question(db_session, test_user) -> db_models.Question:
    """Question asked by test_user, tagged python and sqlalchemy."""
    question = db_models.Question(
        user_id=test_user.id,
        title="How do I open a session?",
        body="What is the right way to open a SQLAlchemy session?",
    )
    question.tag_links = [
        db_models.QuestionTag(name="python"),
        db_models.QuestionTag(name="sqlalchemy"),
    ]
    db_session.add(question)
    db_session.commit()
    db_session.refresh(question)
    return question


@pytest.fixture
def test_answer(db_session, test_question, other_user) -> db_models.Answer:
    """Answer by other_user on test_question; answer_count is kept in sync."""
    answer = db_models.Answer(
        question_id=test_question.id,
        user_id=other_user.id,
        body="Use a sessionmaker bound to your engine.",
    )
    db_session.add(answer)
    test_question.answer_count = 1
    db_session.commit()
    db_session.refresh(answer)
    return answer


def bearer(user: db_models.User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def auth_headers(test_user) -> dict:
    return bearer(test_user)


@pytest.fixture
def other_auth_headers(other_user) -> dict:
    return bearer(other_user)


@pytest.fixture
def admin_auth_headers(admin_user) -> dict:
    return bearer(admin_user)


@pytest.fixture
def headers_for():
    """Mint bearer headers for any user."""
    return bearer
