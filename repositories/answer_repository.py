"""
Answer repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import case, delete, func, update
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models

from .base import BaseRepository


class AnswerRepository(BaseRepository[db_models.Answer]):
    """Repository for Answer entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize answer repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Answer, db)

    def list_for_question(
        self,
        question_id: int,
        page: int,
        limit: int,
        sort_by: str = "votes",
        ascending: bool = False,
    ) -> tuple[List[db_models.Answer], int]:
        """
        Answers of a question, accepted answer first.

        Args:
            question_id: Question ID
            page: 1-based page number
            limit: Page size
            sort_by: votes or createdAt
            ascending: Direction of the secondary sort

        Returns:
            Tuple of (answers, total)
        """
        column = (
            db_models.Answer.created_at
            if sort_by == "createdAt"
            else db_models.Answer.votes
        )
        query = (
            self.db.query(db_models.Answer)
            .options(joinedload(db_models.Answer.author))
            .filter(db_models.Answer.question_id == question_id)
            .order_by(
                db_models.Answer.is_accepted.desc(),
                column.asc() if ascending else column.desc(),
                db_models.Answer.id.asc(),
            )
        )
        return self.paginate(query, page, limit)

    def all_for_question(self, question_id: int) -> List[db_models.Answer]:
        """Every answer of a question, accepted first then by votes."""
        return (
            self.db.query(db_models.Answer)
            .options(joinedload(db_models.Answer.author))
            .filter(db_models.Answer.question_id == question_id)
            .order_by(
                db_models.Answer.is_accepted.desc(),
                db_models.Answer.votes.desc(),
                db_models.Answer.id.asc(),
            )
            .all()
        )

    def ids_for_question(self, question_id: int) -> List[int]:
        return [
            row[0]
            for row in self.db.query(db_models.Answer.id)
            .filter(db_models.Answer.question_id == question_id)
            .all()
        ]

    def list_by_user(
        self, user_id: int, page: int, limit: int
    ) -> tuple[List[db_models.Answer], int]:
        query = (
            self.db.query(db_models.Answer)
            .options(joinedload(db_models.Answer.question))
            .filter(db_models.Answer.user_id == user_id)
            .order_by(db_models.Answer.created_at.desc(), db_models.Answer.id.desc())
        )
        return self.paginate(query, page, limit)

    def get_by_user(
        self, user_id: int, limit: int, order_by_votes: bool = False
    ) -> List[db_models.Answer]:
        column = (
            db_models.Answer.votes if order_by_votes else db_models.Answer.created_at
        )
        return (
            self.db.query(db_models.Answer)
            .options(joinedload(db_models.Answer.question))
            .filter(db_models.Answer.user_id == user_id)
            .order_by(column.desc())
            .limit(limit)
            .all()
        )

    def get_accepted(self, question_id: int) -> Optional[db_models.Answer]:
        return (
            self.db.query(db_models.Answer)
            .filter(
                db_models.Answer.question_id == question_id,
                db_models.Answer.is_accepted == True,  # noqa: E712
            )
            .first()
        )

    def set_accepted(self, question_id: int, answer_id: int) -> None:
        """
        Mark one answer accepted and clear the flag on its siblings.

        Both statements run in the caller's transaction.
        """
        self.db.execute(
            update(db_models.Answer)
            .where(
                db_models.Answer.question_id == question_id,
                db_models.Answer.id != answer_id,
                db_models.Answer.is_accepted == True,  # noqa: E712
            )
            .values(is_accepted=False)
            .execution_options(synchronize_session=False)
        )
        self.db.execute(
            update(db_models.Answer)
            .where(db_models.Answer.id == answer_id)
            .values(is_accepted=True)
            .execution_options(synchronize_session=False)
        )

    def vote_stats_for_user(self, user_id: int) -> tuple[int, int, int, float]:
        """
        Aggregate a user's answers.

        Returns:
            Tuple of (count, total votes, accepted count, average votes)
        """
        accepted = func.sum(
            case((db_models.Answer.is_accepted == True, 1), else_=0)  # noqa: E712
        )
        row = (
            self.db.query(
                func.count(db_models.Answer.id),
                func.coalesce(func.sum(db_models.Answer.votes), 0),
                func.coalesce(accepted, 0),
                func.coalesce(func.avg(db_models.Answer.votes), 0),
            )
            .filter(db_models.Answer.user_id == user_id)
            .one()
        )
        return int(row[0]), int(row[1]), int(row[2]), float(row[3])

    def count_by_user(self, user_id: int, accepted_only: bool = False, since=None) -> int:
        query = self.db.query(func.count(db_models.Answer.id)).filter(
            db_models.Answer.user_id == user_id
        )
        if accepted_only:
            query = query.filter(db_models.Answer.is_accepted == True)  # noqa: E712
        if since is not None:
            query = query.filter(db_models.Answer.created_at >= since)
        return query.scalar() or 0

    def count_where(self, *criteria) -> int:
        return (
            self.db.query(func.count(db_models.Answer.id)).filter(*criteria).scalar()
            or 0
        )

    def top_by_votes(self, limit: int) -> List[db_models.Answer]:
        return (
            self.db.query(db_models.Answer)
            .options(
                joinedload(db_models.Answer.author),
                joinedload(db_models.Answer.question),
            )
            .order_by(db_models.Answer.votes.desc(), db_models.Answer.id.desc())
            .limit(limit)
            .all()
        )

    def recent(self, limit: int) -> List[db_models.Answer]:
        return (
            self.db.query(db_models.Answer)
            .options(
                joinedload(db_models.Answer.author),
                joinedload(db_models.Answer.question),
            )
            .order_by(db_models.Answer.created_at.desc())
            .limit(limit)
            .all()
        )

    def delete_by_ids(self, answer_ids: List[int]) -> None:
        if not answer_ids:
            return
        self.db.execute(
            delete(db_models.Answer)
            .where(db_models.Answer.id.in_(answer_ids))
            .execution_options(synchronize_session=False)
        )
