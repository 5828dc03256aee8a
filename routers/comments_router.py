"""Comment router endpoints.

Comments live under ``/question/{id}`` or ``/answer/{id}`` depending on the
content they are attached to.
"""

from typing import Literal

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import LimitParam, PageParam, build_pagination
from helpers.responses import api_response
from repositories.database import get_db
from services.comment_service import CommentService

router = APIRouter(prefix="/comments", tags=["comments"])

ParentType = Literal["question", "answer"]


@router.get("/{content_type}/{content_id}")
def get_comments(
    content_type: ParentType,
    content_id: int,
    page: PageParam = 1,
    limit: LimitParam = 20,
    db: Session = Depends(get_db),
) -> dict:
    """Comments of a question or answer, oldest first."""
    comments, total = CommentService.list_comments(
        db, db_models.ContentType(content_type), content_id, page, limit
    )
    return api_response(
        {
            "comments": [schemas.CommentOut.model_validate(c) for c in comments],
            "pagination": build_pagination(page, limit, total, "totalComments"),
        }
    )


@router.post("/{content_type}/{content_id}", status_code=status.HTTP_201_CREATED)
def add_comment(
    content_type: ParentType,
    content_id: int,
    payload: schemas.BodyRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    comment = CommentService.add_comment(
        db,
        current_user,
        db_models.ContentType(content_type),
        content_id,
        payload.body,
    )
    return api_response(
        {"comment": schemas.CommentOut.model_validate(comment)},
        "Comment added successfully",
    )


@router.put("/{comment_id}")
def update_comment(
    comment_id: int,
    payload: schemas.BodyRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    comment = CommentService.update_comment(db, current_user, comment_id, payload.body)
    return api_response(
        {"comment": schemas.CommentOut.model_validate(comment)},
        "Comment updated successfully",
    )


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    CommentService.delete_comment(db, current_user, comment_id)
    return api_response(message="Comment deleted successfully")
