"""
In-app notification service.

Notifications are staged in the caller's session so they commit (or roll back)
together with the action that produced them.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.time_utils import utc_now
from models.exceptions import NotificationNotFoundException
from repositories.notification_repository import NotificationRepository

NotificationType = db_models.NotificationType

# Title per notification kind; the message carries the specifics
TITLES = {
    NotificationType.FOLLOW: "New Follower",
    NotificationType.QUESTION_UPVOTE: "Question Upvoted",
    NotificationType.QUESTION_DOWNVOTE: "Question Downvoted",
    NotificationType.ANSWER_UPVOTE: "Answer Upvoted",
    NotificationType.ANSWER_DOWNVOTE: "Answer Downvoted",
    NotificationType.ANSWER_ACCEPTED: "Answer Accepted",
    NotificationType.NEW_ANSWER: "New Answer",
    NotificationType.NEW_COMMENT: "New Comment",
    NotificationType.MENTION: "You Were Mentioned",
    NotificationType.BADGE_EARNED: "Badge Earned",
    NotificationType.REPUTATION_MILESTONE: "Reputation Milestone",
}


class NotificationService:
    """Create, list and acknowledge user notifications."""

    @staticmethod
    def notify(
        db: Session,
        recipient_id: int,
        sender: Optional[db_models.User],
        notification_type: NotificationType,
        message: str,
        question_id: Optional[int] = None,
        answer_id: Optional[int] = None,
        comment_id: Optional[int] = None,
        data: Optional[dict] = None,
    ) -> Optional[db_models.Notification]:
        """
        Stage a notification for ``recipient_id``.

        Nothing is created when the sender is the recipient.

        Returns:
            The staged notification, or None when skipped
        """
        if sender is not None and sender.id == recipient_id:
            return None

        notification = db_models.Notification(
            recipient_id=recipient_id,
            sender_id=sender.id if sender is not None else None,
            type=notification_type,
            title=TITLES[notification_type],
            message=message,
            question_id=question_id,
            answer_id=answer_id,
            comment_id=comment_id,
            data=data or {},
        )
        NotificationRepository(db).add(notification)
        logger.debug(
            f"Notification staged: type={notification_type.value} recipient={recipient_id}"
        )
        return notification

    @staticmethod
    def list_for_user(
        db: Session,
        user: db_models.User,
        page: int,
        limit: int,
        unread_only: bool = False,
    ) -> tuple[list[db_models.Notification], int, int]:
        """
        Page through a user's notifications, newest first.

        Returns:
            Tuple of (notifications, total matching the filter, unread total)
        """
        repo = NotificationRepository(db)
        notifications, total = repo.list_for_recipient(
            user.id, page, limit, unread_only
        )
        return notifications, total, repo.count_unread(user.id)

    @staticmethod
    def mark_read(
        db: Session, user: db_models.User, notification_id: int
    ) -> db_models.Notification:
        """
        Raises:
            NotificationNotFoundException: If the notification does not exist
                or belongs to someone else
        """
        repo = NotificationRepository(db)
        notification = repo.get_for_recipient(notification_id, user.id)
        if not notification:
            raise NotificationNotFoundException()
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utc_now()
        return repo.update(notification)

    @staticmethod
    def mark_all_read(db: Session, user: db_models.User) -> int:
        repo = NotificationRepository(db)
        count = repo.mark_all_read(user.id, utc_now())
        repo.commit()
        logger.info(f"User {user.id} marked {count} notifications as read")
        return count
