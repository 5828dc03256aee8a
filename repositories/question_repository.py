"""
Question repository for database operations.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import Select, delete, func
from sqlalchemy.orm import Query, Session, joinedload, selectinload

import repositories.db_models as db_models

from .base import BaseRepository

# Whitelisted sort keys mapped to columns; "answers" uses the maintained counter
SORT_COLUMNS = {
    "createdAt": db_models.Question.created_at,
    "votes": db_models.Question.votes,
    "answers": db_models.Question.answer_count,
}


class QuestionRepository(BaseRepository[db_models.Question]):
    """Repository for Question entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize question repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Question, db)

    def _base_query(self) -> Query:
        return self.db.query(db_models.Question).options(
            joinedload(db_models.Question.author),
            selectinload(db_models.Question.tag_links),
        )

    def get_with_details(self, question_id: int) -> Optional[db_models.Question]:
        """Get a question with author and tags eagerly loaded."""
        return (
            self._base_query().filter(db_models.Question.id == question_id).first()
        )

    def list_questions(
        self,
        page: int,
        limit: int,
        sort_by: str = "createdAt",
        ascending: bool = False,
        tags: Optional[List[str]] = None,
        matching: Optional[Select] = None,
        user_id: Optional[int] = None,
    ) -> tuple[List[db_models.Question], int]:
        """
        List questions with filtering, sorting and pagination.

        Args:
            page: 1-based page number
            limit: Page size
            sort_by: createdAt, votes or answers (unknown keys fall back to createdAt)
            ascending: Sort direction
            tags: Match questions carrying any of these tags
            matching: Select of question ids to restrict to (full-text matches)
            user_id: Restrict to questions of one author

        Returns:
            Tuple of (questions, total matching)
        """
        query = self._base_query()

        if tags:
            tagged = self.db.query(db_models.QuestionTag.question_id).filter(
                db_models.QuestionTag.name.in_(tags)
            )
            query = query.filter(db_models.Question.id.in_(tagged))

        if matching is not None:
            query = query.filter(db_models.Question.id.in_(matching))

        if user_id is not None:
            query = query.filter(db_models.Question.user_id == user_id)

        column = SORT_COLUMNS.get(sort_by, db_models.Question.created_at)
        order = column.asc() if ascending else column.desc()
        # Stable tiebreak so pages never overlap
        query = query.order_by(order, db_models.Question.id.desc())

        return self.paginate(query, page, limit)

    def replace_tags(self, question: db_models.Question, tags: List[str]) -> None:
        """
        Replace the tag set of a question (staged, not committed).

        Links whose name survives are kept as-is so the (question, name)
        unique constraint never sees a delete and insert of the same pair.
        """
        existing = {link.name: link for link in question.tag_links}
        question.tag_links = [
            existing.get(name) or db_models.QuestionTag(name=name) for name in tags
        ]

    def get_by_user(
        self, user_id: int, limit: int, order_by_votes: bool = False
    ) -> List[db_models.Question]:
        column = (
            db_models.Question.votes if order_by_votes else db_models.Question.created_at
        )
        return (
            self.db.query(db_models.Question)
            .filter(db_models.Question.user_id == user_id)
            .order_by(column.desc())
            .limit(limit)
            .all()
        )

    def count_by_user(self, user_id: int, since=None) -> int:
        query = self.db.query(func.count(db_models.Question.id)).filter(
            db_models.Question.user_id == user_id
        )
        if since is not None:
            query = query.filter(db_models.Question.created_at >= since)
        return query.scalar() or 0

    def vote_stats_for_user(self, user_id: int) -> tuple[int, int, int, float]:
        """
        Aggregate a user's questions.

        Returns:
            Tuple of (count, total votes, total views, average votes)
        """
        row = (
            self.db.query(
                func.count(db_models.Question.id),
                func.coalesce(func.sum(db_models.Question.votes), 0),
                func.coalesce(func.sum(db_models.Question.views), 0),
                func.coalesce(func.avg(db_models.Question.votes), 0),
            )
            .filter(db_models.Question.user_id == user_id)
            .one()
        )
        return int(row[0]), int(row[1]), int(row[2]), float(row[3])

    def count_where(self, *criteria) -> int:
        return (
            self.db.query(func.count(db_models.Question.id)).filter(*criteria).scalar()
            or 0
        )

    def top_by_votes(self, limit: int) -> List[db_models.Question]:
        return (
            self._base_query()
            .order_by(db_models.Question.votes.desc(), db_models.Question.id.desc())
            .limit(limit)
            .all()
        )

    def recent(self, limit: int) -> List[db_models.Question]:
        return (
            self._base_query()
            .order_by(db_models.Question.created_at.desc())
            .limit(limit)
            .all()
        )

    def popular_tags(self, limit: int = 10) -> List[tuple[str, int]]:
        """Most used tags as (tag, question count) pairs."""
        count = func.count(db_models.QuestionTag.id)
        return [
            (name, int(total))
            for name, total in self.db.query(db_models.QuestionTag.name, count)
            .group_by(db_models.QuestionTag.name)
            .order_by(count.desc(), db_models.QuestionTag.name)
            .limit(limit)
            .all()
        ]

    def delete_by_id(self, question_id: int) -> None:
        """Stage removal of a question row and its tags."""
        self.db.execute(
            delete(db_models.QuestionTag).where(
                db_models.QuestionTag.question_id == question_id
            )
        )
        self.db.execute(
            delete(db_models.Question).where(db_models.Question.id == question_id)
        )
