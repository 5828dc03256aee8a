"""
Comment Service

Comments hang off a question or an answer through (content_type, content_id).
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import (
    CommentNotFoundException,
    PermissionDeniedException,
    ValidationException,
)
from repositories.comment_repository import CommentRepository
from services.content_service import ContentService
from services.notification_service import NotificationService

ContentType = db_models.ContentType

# Kinds of content a comment may be attached to
COMMENTABLE = (ContentType.QUESTION, ContentType.ANSWER)


class CommentService:
    """Service for comment business logic."""

    @staticmethod
    def list_comments(
        db: Session,
        content_type: ContentType,
        content_id: int,
        page: int,
        limit: int,
    ) -> tuple[List[db_models.Comment], int]:
        """
        Raises:
            NotFoundException: If the parent does not exist
        """
        ContentService.get_content(db, content_type, content_id)
        return CommentRepository(db).list_for_content(
            content_type, content_id, page, limit
        )

    @staticmethod
    def add_comment(
        db: Session,
        user: db_models.User,
        content_type: ContentType,
        content_id: int,
        body: Optional[str],
    ) -> db_models.Comment:
        """
        Comment on a question or answer and notify its author.

        Raises:
            ValidationException: If the body is empty
            NotFoundException: If the parent does not exist
        """
        if content_type not in COMMENTABLE:
            raise ValidationException("Invalid content type")
        body = (body or "").strip()
        if not body:
            raise ValidationException("Please provide comment body")

        parent = ContentService.get_content(db, content_type, content_id)
        question_id = (
            parent.id if content_type == ContentType.QUESTION else parent.question_id
        )

        comment_repo = CommentRepository(db)
        comment = db_models.Comment(
            user_id=user.id,
            content_type=content_type,
            content_id=content_id,
            body=body,
        )
        comment_repo.add(comment)
        comment_repo.flush()
        NotificationService.notify(
            db,
            recipient_id=parent.user_id,
            sender=user,
            notification_type=db_models.NotificationType.NEW_COMMENT,
            message=f"{user.username} commented on your {content_type.value}",
            question_id=question_id,
            answer_id=parent.id if content_type == ContentType.ANSWER else None,
            comment_id=comment.id,
        )
        comment_repo.commit()
        comment_repo.refresh(comment)
        logger.info(
            f"Comment {comment.id} added to {content_type.value} {content_id}"
        )
        return comment

    @staticmethod
    def _get_comment(db: Session, comment_id: int) -> db_models.Comment:
        comment = CommentRepository(db).get_by_id(comment_id)
        if not comment:
            raise CommentNotFoundException()
        return comment

    @staticmethod
    def update_comment(
        db: Session, user: db_models.User, comment_id: int, body: Optional[str]
    ) -> db_models.Comment:
        """
        Raises:
            CommentNotFoundException: If the comment does not exist
            PermissionDeniedException: If the user is not the author
            ValidationException: If the body is empty
        """
        comment = CommentService._get_comment(db, comment_id)
        if comment.user_id != user.id:
            raise PermissionDeniedException("Not authorized to update this comment")
        body = (body or "").strip()
        if not body:
            raise ValidationException("Please provide comment body")
        comment.body = body
        return CommentRepository(db).update(comment)

    @staticmethod
    def delete_comment(db: Session, user: db_models.User, comment_id: int) -> None:
        """
        Raises:
            CommentNotFoundException: If the comment does not exist
            PermissionDeniedException: If the user is neither author nor admin
        """
        comment = CommentService._get_comment(db, comment_id)
        if comment.user_id != user.id and not user.is_admin:
            raise PermissionDeniedException("Not authorized to delete this comment")
        ContentService.delete(db, ContentType.COMMENT, comment_id)
