"""
User repository for database operations.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class UserRepository(BaseRepository[db_models.User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize user repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.User, db)

    def get_by_email(self, email: str) -> Optional[db_models.User]:
        """
        Get user by email.

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User).filter(db_models.User.email == email).first()
        )

    def get_by_username(self, username: str) -> Optional[db_models.User]:
        """
        Get user by username.

        Args:
            username: Username

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.username == username)
            .first()
        )

    def get_by_email_or_username(
        self, email: str, username: str
    ) -> Optional[db_models.User]:
        """Get the first user whose email or username collides with the given pair."""
        return (
            self.db.query(db_models.User)
            .filter(
                or_(
                    db_models.User.email == email,
                    db_models.User.username == username,
                )
            )
            .first()
        )

    def get_by_verification_token(
        self, token: str, now: datetime
    ) -> Optional[db_models.User]:
        """Get the user holding an unexpired verification token."""
        return (
            self.db.query(db_models.User)
            .filter(
                db_models.User.verification_token == token,
                db_models.User.verification_token_expires > now,
            )
            .first()
        )

    def get_by_reset_token_hash(
        self, token_hash: str, now: datetime
    ) -> Optional[db_models.User]:
        """Get the user holding an unexpired password reset token hash."""
        return (
            self.db.query(db_models.User)
            .filter(
                db_models.User.reset_password_token == token_hash,
                db_models.User.reset_password_expires > now,
            )
            .first()
        )

    def get_leaderboard(
        self, limit: int, joined_since: datetime | None = None
    ) -> List[db_models.User]:
        """
        Top users by reputation.

        Args:
            limit: Maximum number of users
            joined_since: Only consider users created after this instant

        Returns:
            Users ordered by reputation descending
        """
        query = self.db.query(db_models.User)
        if joined_since is not None:
            query = query.filter(db_models.User.created_at >= joined_since)
        return query.order_by(db_models.User.reputation.desc()).limit(limit).all()

    def search_by_username(
        self, term: str, page: int, limit: int
    ) -> tuple[List[db_models.User], int]:
        """Case-insensitive username substring search, best reputation first."""
        query = (
            self.db.query(db_models.User)
            .filter(func.lower(db_models.User.username).contains(term.lower()))
            .order_by(db_models.User.reputation.desc())
        )
        return self.paginate(query, page, limit)

    def get_suggestions(
        self, exclude_ids: List[int], limit: int = 10
    ) -> List[db_models.User]:
        """
        Verified users not in ``exclude_ids``, best reputation then newest first.
        """
        query = self.db.query(db_models.User).filter(
            db_models.User.is_verified == True  # noqa: E712
        )
        if exclude_ids:
            query = query.filter(db_models.User.id.notin_(exclude_ids))
        return (
            query.order_by(
                db_models.User.reputation.desc(), db_models.User.created_at.desc()
            )
            .limit(limit)
            .all()
        )

    def get_by_ids(self, ids: List[int]) -> List[db_models.User]:
        if not ids:
            return []
        return self.db.query(db_models.User).filter(db_models.User.id.in_(ids)).all()

    def add_reputation(self, user_id: int, delta: int) -> None:
        """Atomically adjust a user's reputation."""
        self.increment(user_id, reputation=delta)

    def count_where(self, *criteria) -> int:
        """Count users matching SQLAlchemy filter criteria."""
        return self.db.query(func.count(db_models.User.id)).filter(*criteria).scalar() or 0

    def get_recent(self, limit: int = 5) -> List[db_models.User]:
        return (
            self.db.query(db_models.User)
            .order_by(db_models.User.created_at.desc())
            .limit(limit)
            .all()
        )

    def get_most_active(self, limit: int = 10) -> List[tuple[db_models.User, int, int]]:
        """
        Users with the most questions plus answers.

        Returns:
            List of (user, question count, answer count)
        """
        question_count = (
            select(func.count(db_models.Question.id))
            .where(db_models.Question.user_id == db_models.User.id)
            .correlate(db_models.User)
            .scalar_subquery()
        )
        answer_count = (
            select(func.count(db_models.Answer.id))
            .where(db_models.Answer.user_id == db_models.User.id)
            .correlate(db_models.User)
            .scalar_subquery()
        )
        rows = (
            self.db.query(db_models.User, question_count, answer_count)
            .order_by((question_count + answer_count).desc(), db_models.User.id)
            .limit(limit)
            .all()
        )
        return [(user, int(questions), int(answers)) for user, questions, answers in rows]
