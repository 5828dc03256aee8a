"""
Notification repository for database operations.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models

from .base import BaseRepository


class NotificationRepository(BaseRepository[db_models.Notification]):
    """Repository for in-app user notifications."""

    def __init__(self, db: Session):
        super().__init__(db_models.Notification, db)

    def list_for_recipient(
        self, recipient_id: int, page: int, limit: int, unread_only: bool = False
    ) -> tuple[List[db_models.Notification], int]:
        query = (
            self.db.query(db_models.Notification)
            .options(joinedload(db_models.Notification.sender))
            .filter(db_models.Notification.recipient_id == recipient_id)
        )
        if unread_only:
            query = query.filter(db_models.Notification.is_read == False)  # noqa: E712
        query = query.order_by(
            db_models.Notification.created_at.desc(), db_models.Notification.id.desc()
        )
        return self.paginate(query, page, limit)

    def count_unread(self, recipient_id: int) -> int:
        return (
            self.db.query(func.count(db_models.Notification.id))
            .filter(
                db_models.Notification.recipient_id == recipient_id,
                db_models.Notification.is_read == False,  # noqa: E712
            )
            .scalar()
            or 0
        )

    def get_for_recipient(
        self, notification_id: int, recipient_id: int
    ) -> Optional[db_models.Notification]:
        return (
            self.db.query(db_models.Notification)
            .filter(
                db_models.Notification.id == notification_id,
                db_models.Notification.recipient_id == recipient_id,
            )
            .first()
        )

    def mark_all_read(self, recipient_id: int, read_at: datetime) -> int:
        """
        Mark every unread notification of a user as read.

        Returns:
            Number of rows changed
        """
        result = self.db.execute(
            update(db_models.Notification)
            .where(
                db_models.Notification.recipient_id == recipient_id,
                db_models.Notification.is_read == False,  # noqa: E712
            )
            .values(is_read=True, read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)
