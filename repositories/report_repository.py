"""
Report repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import delete, func
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models

from .base import BaseRepository


class ReportRepository(BaseRepository[db_models.Report]):
    """Repository for content reports."""

    def __init__(self, db: Session):
        super().__init__(db_models.Report, db)

    def get_existing(
        self,
        reporter_id: int,
        content_type: db_models.ContentType,
        content_id: int,
    ) -> Optional[db_models.Report]:
        """Get the report this user already filed on this content, if any."""
        return (
            self.db.query(db_models.Report)
            .filter(
                db_models.Report.reporter_id == reporter_id,
                db_models.Report.content_type == content_type,
                db_models.Report.content_id == content_id,
            )
            .first()
        )

    def list_reports(
        self,
        page: int,
        limit: int,
        status: Optional[db_models.ReportStatus] = None,
        content_type: Optional[db_models.ContentType] = None,
    ) -> tuple[List[db_models.Report], int]:
        """
        Reports newest first with optional filters.

        Args:
            page: 1-based page number
            limit: Page size
            status: Filter by status
            content_type: Filter by reported content kind

        Returns:
            Tuple of (reports, total)
        """
        query = self.db.query(db_models.Report).options(
            joinedload(db_models.Report.reporter)
        )
        if status is not None:
            query = query.filter(db_models.Report.status == status)
        if content_type is not None:
            query = query.filter(db_models.Report.content_type == content_type)
        query = query.order_by(
            db_models.Report.created_at.desc(), db_models.Report.id.desc()
        )
        return self.paginate(query, page, limit)

    def delete_for_contents(
        self, content_type: db_models.ContentType, content_ids: List[int]
    ) -> None:
        """Stage removal of every report pointing at the given content."""
        if not content_ids:
            return
        self.db.execute(
            delete(db_models.Report)
            .where(
                db_models.Report.content_type == content_type,
                db_models.Report.content_id.in_(content_ids),
            )
            .execution_options(synchronize_session=False)
        )

    def count_where(self, *criteria) -> int:
        return (
            self.db.query(func.count(db_models.Report.id)).filter(*criteria).scalar()
            or 0
        )
