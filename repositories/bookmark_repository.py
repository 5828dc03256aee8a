"""
Bookmark repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import delete, func
from sqlalchemy.orm import Session, joinedload, selectinload

import repositories.db_models as db_models

from .base import BaseRepository


class BookmarkRepository(BaseRepository[db_models.Bookmark]):
    """Repository for the user to question bookmark relation."""

    def __init__(self, db: Session):
        super().__init__(db_models.Bookmark, db)

    def get(self, user_id: int, question_id: int) -> Optional[db_models.Bookmark]:
        return (
            self.db.query(db_models.Bookmark)
            .filter(
                db_models.Bookmark.user_id == user_id,
                db_models.Bookmark.question_id == question_id,
            )
            .first()
        )

    def count_for_user(self, user_id: int) -> int:
        return (
            self.db.query(func.count(db_models.Bookmark.id))
            .filter(db_models.Bookmark.user_id == user_id)
            .scalar()
            or 0
        )

    def list_questions(
        self, user_id: int, page: int, limit: int
    ) -> tuple[List[db_models.Question], int]:
        """
        Bookmarked questions of a user, most recently bookmarked first.

        Returns:
            Tuple of (questions, total bookmarks)
        """
        query = (
            self.db.query(db_models.Bookmark)
            .options(
                joinedload(db_models.Bookmark.question).joinedload(
                    db_models.Question.author
                ),
                joinedload(db_models.Bookmark.question).selectinload(
                    db_models.Question.tag_links
                ),
            )
            .filter(db_models.Bookmark.user_id == user_id)
            .order_by(db_models.Bookmark.created_at.desc(), db_models.Bookmark.id.desc())
        )
        bookmarks, total = self.paginate(query, page, limit)
        return [bookmark.question for bookmark in bookmarks], total

    def delete_for_question(self, question_id: int) -> None:
        self.db.execute(
            delete(db_models.Bookmark)
            .where(db_models.Bookmark.question_id == question_id)
            .execution_options(synchronize_session=False)
        )
