"""Bookmark router endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import LimitParam, PageParam, build_pagination
from helpers.responses import api_response
from repositories.database import get_db
from services.bookmark_service import BookmarkService

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.get("")
def get_bookmarks(
    page: PageParam = 1,
    limit: LimitParam = 10,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    """Bookmarked questions, most recently saved first."""
    questions, total = BookmarkService.list_bookmarks(db, current_user, page, limit)
    return api_response(
        {
            "questions": [schemas.QuestionOut.model_validate(q) for q in questions],
            "pagination": build_pagination(page, limit, total, "totalBookmarks"),
        }
    )


@router.get("/check/{question_id}")
def check_bookmark(
    question_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    return api_response(
        {
            "questionId": question_id,
            "isBookmarked": BookmarkService.is_bookmarked(db, current_user, question_id),
        }
    )


@router.post("/{question_id}")
def add_bookmark(
    question_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    total = BookmarkService.add_bookmark(db, current_user, question_id)
    return api_response(
        {"questionId": question_id, "totalBookmarks": total},
        "Question bookmarked successfully",
    )


@router.delete("/{question_id}")
def remove_bookmark(
    question_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    total = BookmarkService.remove_bookmark(db, current_user, question_id)
    return api_response(
        {"questionId": question_id, "totalBookmarks": total},
        "Bookmark removed successfully",
    )
