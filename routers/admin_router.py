"""Admin and moderation router endpoints.

Filing a report only needs a signed-in user; everything else requires an
admin.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import LimitParam, PageParam, build_pagination
from helpers.responses import api_response
from repositories.database import get_db
from services.admin_service import AdminService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/reports", status_code=status.HTTP_201_CREATED)
def create_report(
    payload: schemas.ReportCreate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    report = AdminService.create_report(
        db, current_user, payload.content_id, payload.content_type, payload.reason
    )
    return api_response(
        {"report": schemas.ReportOut.model_validate(report)},
        "Report submitted successfully",
    )


@router.get("/reports")
def get_reports(
    page: PageParam = 1,
    limit: LimitParam = 20,
    status_filter: Optional[str] = Query(None, alias="status"),
    content_type: Optional[str] = Query(None, alias="contentType"),
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
) -> dict:
    """Reports newest first, filterable by status and content type."""
    reports, total = AdminService.list_reports(
        db, page, limit, status=status_filter, content_type=content_type
    )
    return api_response(
        {
            "reports": [schemas.ReportOut.model_validate(r) for r in reports],
            "pagination": build_pagination(page, limit, total, "totalReports"),
        }
    )


@router.put("/reports/{report_id}/resolve")
def resolve_report(
    report_id: int,
    payload: schemas.ActionRequest,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
) -> dict:
    """Resolve a report with ``dismiss`` or ``delete`` (removes the content)."""
    report = AdminService.resolve_report(db, current_user, report_id, payload.action)
    message = (
        "Report resolved and content deleted"
        if payload.action == "delete"
        else "Report resolved"
    )
    return api_response({"report": report}, message)


@router.get("/stats")
def get_stats(
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
) -> dict:
    return api_response(
        AdminService.get_stats(db),
        "Admin dashboard statistics retrieved successfully",
    )


@router.delete("/content/{content_type}/{content_id}")
def delete_content(
    content_type: str,
    content_id: int,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
) -> dict:
    deleted_id = AdminService.delete_content(db, content_type, content_id)
    return api_response(
        {"deletedId": deleted_id}, f"{content_type} deleted successfully"
    )


@router.put("/users/{user_id}")
def manage_user(
    user_id: int,
    payload: schemas.ActionRequest,
    current_user: db_models.User = Depends(auth.get_admin_user),
    db: Session = Depends(get_db),
) -> dict:
    """Apply a moderation action such as ban, promote or reset_password."""
    user = AdminService.manage_user(db, current_user, user_id, payload.action)
    return api_response(
        {"user": schemas.AdminUserSummary.model_validate(user)},
        f"User {payload.action} successful",
    )
