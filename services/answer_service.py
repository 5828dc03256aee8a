"""
Answer Service

Business logic for answering questions and accepting answers.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import (
    AnswerNotFoundException,
    PermissionDeniedException,
    QuestionNotFoundException,
    ValidationException,
)
from repositories.answer_repository import AnswerRepository
from repositories.question_repository import QuestionRepository
from repositories.user_repository import UserRepository
from services.content_service import ContentService
from services.notification_service import NotificationService

ACCEPT_REPUTATION_BONUS = 15


class AnswerService:
    """Service for answer business logic."""

    @staticmethod
    def list_for_question(
        db: Session,
        question_id: int,
        page: int,
        limit: int,
        sort_by: str = "votes",
        order: str = "desc",
    ) -> tuple[List[db_models.Answer], int]:
        """
        Answers of a question; a missing or deleted question has none.
        """
        return AnswerRepository(db).list_for_question(
            question_id, page, limit, sort_by=sort_by, ascending=order == "asc"
        )

    @staticmethod
    def list_by_user(
        db: Session, user_id: int, page: int, limit: int
    ) -> tuple[List[db_models.Answer], int]:
        return AnswerRepository(db).list_by_user(user_id, page, limit)

    @staticmethod
    def _get_answer(db: Session, answer_id: int) -> db_models.Answer:
        answer = AnswerRepository(db).get_by_id(answer_id)
        if not answer:
            raise AnswerNotFoundException()
        return answer

    @staticmethod
    def create_answer(
        db: Session, user: db_models.User, question_id: int, body: Optional[str]
    ) -> db_models.Answer:
        """
        Answer a question and bump its answer counter in the same commit.

        Raises:
            ValidationException: If the body is empty
            QuestionNotFoundException: If the question does not exist
        """
        body = (body or "").strip()
        if not body:
            raise ValidationException("Please provide answer body")

        question_repo = QuestionRepository(db)
        question = question_repo.get_by_id(question_id)
        if not question:
            raise QuestionNotFoundException()

        answer_repo = AnswerRepository(db)
        answer = db_models.Answer(question_id=question.id, user_id=user.id, body=body)
        answer_repo.add(answer)
        answer_repo.flush()
        question_repo.increment(question.id, answer_count=1)
        NotificationService.notify(
            db,
            recipient_id=question.user_id,
            sender=user,
            notification_type=db_models.NotificationType.NEW_ANSWER,
            message=f'{user.username} answered your question "{question.title}"',
            question_id=question.id,
            answer_id=answer.id,
        )
        answer_repo.commit()
        answer_repo.refresh(answer)
        logger.info(f"Answer {answer.id} created on question {question.id}")
        return answer

    @staticmethod
    def update_answer(
        db: Session, user: db_models.User, answer_id: int, body: Optional[str]
    ) -> db_models.Answer:
        """
        Raises:
            AnswerNotFoundException: If the answer does not exist
            PermissionDeniedException: If the user is not the author
            ValidationException: If the body is empty
        """
        answer = AnswerService._get_answer(db, answer_id)
        if answer.user_id != user.id:
            raise PermissionDeniedException("Not authorized to update this answer")
        body = (body or "").strip()
        if not body:
            raise ValidationException("Please provide answer body")

        answer.body = body
        return AnswerRepository(db).update(answer)

    @staticmethod
    def delete_answer(db: Session, user: db_models.User, answer_id: int) -> None:
        """
        Delete an answer with its comments and reports.

        Raises:
            AnswerNotFoundException: If the answer does not exist
            PermissionDeniedException: If the user is neither author nor admin
        """
        answer = AnswerService._get_answer(db, answer_id)
        if answer.user_id != user.id and not user.is_admin:
            raise PermissionDeniedException("Not authorized to delete this answer")
        ContentService.delete(db, db_models.ContentType.ANSWER, answer_id)
        logger.info(f"Answer {answer_id} deleted by user {user.id}")

    @staticmethod
    def accept_answer(
        db: Session, user: db_models.User, answer_id: int
    ) -> db_models.Answer:
        """
        Mark an answer as the accepted one of its question.

        The answer author earns the bonus once, and never for accepting an
        answer to their own question.

        Raises:
            AnswerNotFoundException: If the answer does not exist
            PermissionDeniedException: If the user does not own the question
        """
        answer_repo = AnswerRepository(db)
        answer = AnswerService._get_answer(db, answer_id)
        question = answer.question
        if question.user_id != user.id:
            raise PermissionDeniedException("Only the question owner can accept answers")

        already_accepted = bool(answer.is_accepted)
        answer_repo.set_accepted(question.id, answer.id)

        if not already_accepted and answer.user_id != question.user_id:
            UserRepository(db).add_reputation(answer.user_id, ACCEPT_REPUTATION_BONUS)
            NotificationService.notify(
                db,
                recipient_id=answer.user_id,
                sender=user,
                notification_type=db_models.NotificationType.ANSWER_ACCEPTED,
                message=f'Your answer to "{question.title}" was accepted',
                question_id=question.id,
                answer_id=answer.id,
            )

        answer_repo.commit()
        answer_repo.refresh(answer)
        logger.info(f"Answer {answer.id} accepted on question {question.id}")
        return answer
