"""
Question Service

Business logic for asking, browsing, editing and deleting questions.
"""

from typing import List, Optional, Union

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import (
    PermissionDeniedException,
    QuestionNotFoundException,
    ValidationException,
)
from repositories.answer_repository import AnswerRepository
from repositories.comment_repository import CommentRepository
from repositories.question_repository import QuestionRepository
from services.content_service import ContentService
from services.search import get_search_backend

MAX_TAG_LENGTH = 50


def normalize_tags(tags: Optional[Union[List[str], str]]) -> List[str]:
    """
    Trim, lowercase and deduplicate tags (first occurrence wins).

    Accepts a list or a comma-separated string.
    """
    if not tags:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    result: List[str] = []
    for tag in tags:
        name = str(tag).strip().lower()[:MAX_TAG_LENGTH]
        if name and name not in result:
            result.append(name)
    return result


class QuestionService:
    """Service for question business logic."""

    @staticmethod
    def list_questions(
        db: Session,
        page: int,
        limit: int,
        sort_by: str = "createdAt",
        order: str = "desc",
        tags: Optional[str] = None,
    ) -> tuple[List[db_models.Question], int]:
        return QuestionRepository(db).list_questions(
            page,
            limit,
            sort_by=sort_by,
            ascending=order == "asc",
            tags=normalize_tags(tags) or None,
        )

    @staticmethod
    def search(
        db: Session,
        q: Optional[str],
        tags: Optional[str],
        page: int,
        limit: int,
    ) -> tuple[List[db_models.Question], int]:
        """
        Full-text search over title and body, narrowed to any of ``tags``.

        Raises:
            ValidationException: If neither a query nor tags are given
        """
        tag_list = normalize_tags(tags)
        term = (q or "").strip()
        if not term and not tag_list:
            raise ValidationException("Please provide search query or tags")

        matching = None
        if term:
            backend = get_search_backend(db.get_bind().dialect.name)
            matching = backend.search_ids(term)
            if matching is None:
                logger.debug(f"Search '{term}' has no indexable terms")
                return [], 0
        return QuestionRepository(db).list_questions(
            page, limit, tags=tag_list or None, matching=matching
        )

    @staticmethod
    def list_by_user(
        db: Session, user_id: int, page: int, limit: int
    ) -> tuple[List[db_models.Question], int]:
        return QuestionRepository(db).list_questions(page, limit, user_id=user_id)

    @staticmethod
    def get_question_detail(
        db: Session, question_id: int
    ) -> tuple[db_models.Question, List[db_models.Answer], List[db_models.Comment]]:
        """
        Load a question with its answers and comments and count the view.

        Returns:
            Tuple of (question, answers accepted first, question comments)

        Raises:
            QuestionNotFoundException: If the question does not exist
        """
        question_repo = QuestionRepository(db)
        if not question_repo.exists(question_id):
            raise QuestionNotFoundException()

        question_repo.increment(question_id, views=1)
        question_repo.commit()

        question = question_repo.get_with_details(question_id)
        if question is None:
            raise QuestionNotFoundException()
        answers = AnswerRepository(db).all_for_question(question_id)
        comments, _ = CommentRepository(db).list_for_content(
            db_models.ContentType.QUESTION, question_id, page=1, limit=1000
        )
        return question, answers, comments

    @staticmethod
    def create_question(
        db: Session,
        user: db_models.User,
        title: Optional[str],
        body: Optional[str],
        tags: Optional[Union[List[str], str]],
    ) -> db_models.Question:
        """
        Raises:
            ValidationException: If title or body is missing
        """
        title = (title or "").strip()
        body = (body or "").strip()
        if not title or not body:
            raise ValidationException("Please provide title and body for the question")

        question_repo = QuestionRepository(db)
        question = db_models.Question(user_id=user.id, title=title, body=body)
        question_repo.replace_tags(question, normalize_tags(tags))
        question = question_repo.create(question)
        logger.info(f"Question {question.id} created by user {user.id}")
        return question_repo.get_with_details(question.id) or question

    @staticmethod
    def update_question(
        db: Session,
        user: db_models.User,
        question_id: int,
        title: Optional[str],
        body: Optional[str],
        tags: Optional[Union[List[str], str]],
    ) -> db_models.Question:
        """
        Update a question owned by ``user``.

        Raises:
            QuestionNotFoundException: If the question does not exist
            PermissionDeniedException: If the user is not the author
        """
        question_repo = QuestionRepository(db)
        question = question_repo.get_with_details(question_id)
        if not question:
            raise QuestionNotFoundException()
        if question.user_id != user.id:
            raise PermissionDeniedException("Not authorized to update this question")

        if title is not None and title.strip():
            question.title = title.strip()
        if body is not None and body.strip():
            question.body = body.strip()
        if tags is not None:
            question_repo.replace_tags(question, normalize_tags(tags))

        question_repo.update(question)
        logger.info(f"Question {question_id} updated by user {user.id}")
        return question_repo.get_with_details(question_id) or question

    @staticmethod
    def delete_question(db: Session, user: db_models.User, question_id: int) -> None:
        """
        Delete a question with its answers, comments, reports and bookmarks.

        Raises:
            QuestionNotFoundException: If the question does not exist
            PermissionDeniedException: If the user is neither author nor admin
        """
        question = QuestionRepository(db).get_by_id(question_id)
        if not question:
            raise QuestionNotFoundException()
        if question.user_id != user.id and not user.is_admin:
            raise PermissionDeniedException("Not authorized to delete this question")

        ContentService.delete(db, db_models.ContentType.QUESTION, question_id)
        logger.info(f"Question {question_id} deleted by user {user.id}")
