"""Question router endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import LimitParam, PageParam, build_pagination
from helpers.responses import api_response
from repositories.database import get_db
from services.question_service import QuestionService
from services.vote_service import VoteService

router = APIRouter(prefix="/questions", tags=["questions"])


def _question_page(
    questions: list[db_models.Question], page: int, limit: int, total: int
) -> dict:
    return {
        "questions": [schemas.QuestionOut.model_validate(q) for q in questions],
        "pagination": build_pagination(page, limit, total, "totalQuestions"),
    }


@router.get("")
def get_questions(
    page: PageParam = 1,
    limit: LimitParam = 10,
    sort_by: str = Query("createdAt", alias="sortBy"),
    order: str = "desc",
    tags: Optional[str] = None,
    db: Session = Depends(get_db),
) -> dict:
    """
    List questions.

    ``sortBy`` is createdAt, votes or answers; ``tags`` is comma-separated and
    matches questions carrying any of them.
    """
    questions, total = QuestionService.list_questions(
        db, page, limit, sort_by=sort_by, order=order, tags=tags
    )
    return api_response(_question_page(questions, page, limit, total))


@router.get("/search")
def search_questions(
    q: Optional[str] = None,
    tags: Optional[str] = None,
    page: PageParam = 1,
    limit: LimitParam = 10,
    db: Session = Depends(get_db),
) -> dict:
    """Case-insensitive search over title and body, optionally by tags."""
    questions, total = QuestionService.search(db, q, tags, page, limit)
    return api_response(_question_page(questions, page, limit, total))


@router.get("/user/{user_id}")
def get_user_questions(
    user_id: int,
    page: PageParam = 1,
    limit: LimitParam = 10,
    db: Session = Depends(get_db),
) -> dict:
    questions, total = QuestionService.list_by_user(db, user_id, page, limit)
    return api_response(_question_page(questions, page, limit, total))


@router.get("/{question_id}")
def get_question(question_id: int, db: Session = Depends(get_db)) -> dict:
    """Question with answers (accepted first) and comments. Counts a view."""
    question, answers, comments = QuestionService.get_question_detail(db, question_id)
    detail = schemas.QuestionDetail(
        **schemas.QuestionOut.model_validate(question).model_dump(),
        answers=[schemas.AnswerOut.model_validate(a) for a in answers],
        comments=[schemas.CommentOut.model_validate(c) for c in comments],
    )
    return api_response({"question": detail})


@router.post("", status_code=status.HTTP_201_CREATED)
def create_question(
    payload: schemas.QuestionCreate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    question = QuestionService.create_question(
        db, current_user, payload.title, payload.body, payload.tags
    )
    return api_response(
        {"question": schemas.QuestionOut.model_validate(question)},
        "Question created successfully",
    )


@router.put("/{question_id}")
def update_question(
    question_id: int,
    payload: schemas.QuestionUpdate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    question = QuestionService.update_question(
        db, current_user, question_id, payload.title, payload.body, payload.tags
    )
    return api_response(
        {"question": schemas.QuestionOut.model_validate(question)},
        "Question updated successfully",
    )


@router.delete("/{question_id}")
def delete_question(
    question_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    """Delete a question and everything attached to it."""
    QuestionService.delete_question(db, current_user, question_id)
    return api_response(message="Question deleted successfully")


@router.post("/{question_id}/vote")
def vote_question(
    question_id: int,
    payload: schemas.VoteRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    new_votes = VoteService.vote_question(
        db, current_user, question_id, payload.vote_type
    )
    return api_response(
        {"questionId": question_id, "newVoteCount": new_votes},
        VoteService.vote_message(db_models.ContentType.QUESTION, str(payload.vote_type)),
    )
