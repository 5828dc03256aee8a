"""
Polymorphic content lookup and cascading deletes.

Comments and reports point at their parent with a (content_type, content_id)
pair. Every content kind is registered here once with its model and its
cascade, so owners and admins delete through the same code path.
"""

from typing import Callable

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import NotFoundException, ValidationException
from repositories.answer_repository import AnswerRepository
from repositories.bookmark_repository import BookmarkRepository
from repositories.comment_repository import CommentRepository
from repositories.question_repository import QuestionRepository
from repositories.report_repository import ReportRepository

ContentType = db_models.ContentType

CONTENT_MODELS: dict[ContentType, type] = {
    ContentType.QUESTION: db_models.Question,
    ContentType.ANSWER: db_models.Answer,
    ContentType.COMMENT: db_models.Comment,
}


def _stage_question_delete(db: Session, question_id: int) -> None:
    answer_ids = AnswerRepository(db).ids_for_question(question_id)
    comment_repo = CommentRepository(db)
    comment_ids = comment_repo.ids_for_contents(
        ContentType.QUESTION, [question_id]
    ) + comment_repo.ids_for_contents(ContentType.ANSWER, answer_ids)

    report_repo = ReportRepository(db)
    report_repo.delete_for_contents(ContentType.QUESTION, [question_id])
    report_repo.delete_for_contents(ContentType.ANSWER, answer_ids)
    report_repo.delete_for_contents(ContentType.COMMENT, comment_ids)

    comment_repo.delete_by_ids(comment_ids)
    BookmarkRepository(db).delete_for_question(question_id)
    AnswerRepository(db).delete_by_ids(answer_ids)
    QuestionRepository(db).delete_by_id(question_id)
    logger.info(
        f"Question {question_id} removed with {len(answer_ids)} answers "
        f"and {len(comment_ids)} comments"
    )


def _stage_answer_delete(db: Session, answer_id: int) -> None:
    answer_repo = AnswerRepository(db)
    answer = answer_repo.get_by_id(answer_id)
    if answer is None:
        return
    comment_repo = CommentRepository(db)
    comment_ids = comment_repo.ids_for_contents(ContentType.ANSWER, [answer_id])

    report_repo = ReportRepository(db)
    report_repo.delete_for_contents(ContentType.ANSWER, [answer_id])
    report_repo.delete_for_contents(ContentType.COMMENT, comment_ids)

    comment_repo.delete_by_ids(comment_ids)
    QuestionRepository(db).increment(answer.question_id, answer_count=-1)
    answer_repo.delete_by_ids([answer_id])
    logger.info(f"Answer {answer_id} removed with {len(comment_ids)} comments")


def _stage_comment_delete(db: Session, comment_id: int) -> None:
    ReportRepository(db).delete_for_contents(ContentType.COMMENT, [comment_id])
    CommentRepository(db).delete_by_ids([comment_id])
    logger.info(f"Comment {comment_id} removed")


CASCADES: dict[ContentType, Callable[[Session, int], None]] = {
    ContentType.QUESTION: _stage_question_delete,
    ContentType.ANSWER: _stage_answer_delete,
    ContentType.COMMENT: _stage_comment_delete,
}


class ContentService:
    """Resolve and delete content addressed by (type, id)."""

    @staticmethod
    def parse_content_type(value: str | None) -> ContentType:
        """
        Raises:
            ValidationException: If value is not a known content kind
        """
        try:
            return ContentType(value)
        except ValueError:
            raise ValidationException("Invalid content type")

    @staticmethod
    def label(content_type: ContentType) -> str:
        return content_type.value.capitalize()

    @staticmethod
    def get_content(db: Session, content_type: ContentType, content_id: int):
        """
        Load one content item.

        Raises:
            NotFoundException: ``"<Type> not found"``
        """
        model = CONTENT_MODELS[content_type]
        content = db.query(model).filter(model.id == content_id).first()
        if content is None:
            raise NotFoundException(f"{ContentService.label(content_type)} not found")
        return content

    @staticmethod
    def stage_delete(db: Session, content_type: ContentType, content_id: int) -> None:
        """Stage the cascade for one item without committing."""
        CASCADES[content_type](db, content_id)

    @staticmethod
    def delete(db: Session, content_type: ContentType, content_id: int) -> int:
        """
        Delete an item and everything hanging off it in one transaction.

        Returns:
            The deleted content ID

        Raises:
            NotFoundException: If the item does not exist
        """
        ContentService.get_content(db, content_type, content_id)
        try:
            ContentService.stage_delete(db, content_type, content_id)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return content_id
