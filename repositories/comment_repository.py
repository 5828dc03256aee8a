"""
Comment repository for database operations.
"""

from __future__ import annotations

from typing import List

from sqlalchemy import and_, delete, func
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models

from .base import BaseRepository


class CommentRepository(BaseRepository[db_models.Comment]):
    """Repository for Comment entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize comment repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Comment, db)

    def list_for_content(
        self,
        content_type: db_models.ContentType,
        content_id: int,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[List[db_models.Comment], int]:
        """
        Comments attached to one question or answer, oldest first.

        Args:
            content_type: Parent kind
            content_id: Parent ID
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (comments, total)
        """
        query = (
            self.db.query(db_models.Comment)
            .options(joinedload(db_models.Comment.author))
            .filter(
                db_models.Comment.content_type == content_type,
                db_models.Comment.content_id == content_id,
            )
            .order_by(db_models.Comment.created_at.asc(), db_models.Comment.id.asc())
        )
        return self.paginate(query, page, limit)

    def ids_for_contents(
        self, content_type: db_models.ContentType, content_ids: List[int]
    ) -> List[int]:
        """IDs of every comment attached to any of the given parents."""
        if not content_ids:
            return []
        return [
            row[0]
            for row in self.db.query(db_models.Comment.id)
            .filter(
                db_models.Comment.content_type == content_type,
                db_models.Comment.content_id.in_(content_ids),
            )
            .all()
        ]

    def delete_by_ids(self, comment_ids: List[int]) -> None:
        if not comment_ids:
            return
        self.db.execute(
            delete(db_models.Comment)
            .where(db_models.Comment.id.in_(comment_ids))
            .execution_options(synchronize_session=False)
        )

    def count_for_content(
        self, content_type: db_models.ContentType, content_id: int
    ) -> int:
        return (
            self.db.query(func.count(db_models.Comment.id))
            .filter(
                and_(
                    db_models.Comment.content_type == content_type,
                    db_models.Comment.content_id == content_id,
                )
            )
            .scalar()
            or 0
        )

    def count_where(self, *criteria) -> int:
        return (
            self.db.query(func.count(db_models.Comment.id)).filter(*criteria).scalar()
            or 0
        )
