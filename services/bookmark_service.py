"""
Bookmark Service
"""

from typing import List

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import BusinessRuleException, QuestionNotFoundException
from repositories.bookmark_repository import BookmarkRepository
from repositories.question_repository import QuestionRepository


class BookmarkService:
    """Service for a user's saved questions."""

    @staticmethod
    def list_bookmarks(
        db: Session, user: db_models.User, page: int, limit: int
    ) -> tuple[List[db_models.Question], int]:
        return BookmarkRepository(db).list_questions(user.id, page, limit)

    @staticmethod
    def add_bookmark(db: Session, user: db_models.User, question_id: int) -> int:
        """
        Bookmark a question.

        Returns:
            The user's bookmark total after the change

        Raises:
            QuestionNotFoundException: If the question does not exist
            BusinessRuleException: If it is already bookmarked
        """
        if not QuestionRepository(db).exists(question_id):
            raise QuestionNotFoundException()

        repo = BookmarkRepository(db)
        if repo.get(user.id, question_id):
            raise BusinessRuleException("Question already bookmarked")

        repo.create(db_models.Bookmark(user_id=user.id, question_id=question_id))
        logger.info(f"User {user.id} bookmarked question {question_id}")
        return repo.count_for_user(user.id)

    @staticmethod
    def remove_bookmark(db: Session, user: db_models.User, question_id: int) -> int:
        """
        Returns:
            The user's bookmark total after the change

        Raises:
            BusinessRuleException: If the question is not bookmarked
        """
        repo = BookmarkRepository(db)
        bookmark = repo.get(user.id, question_id)
        if not bookmark:
            raise BusinessRuleException("Question not in bookmarks")

        repo.delete(bookmark)
        repo.commit()
        logger.info(f"User {user.id} removed bookmark on question {question_id}")
        return repo.count_for_user(user.id)

    @staticmethod
    def is_bookmarked(db: Session, user: db_models.User, question_id: int) -> bool:
        return BookmarkRepository(db).get(user.id, question_id) is not None
