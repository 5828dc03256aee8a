"""Answer router endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import LimitParam, PageParam, build_pagination
from helpers.responses import api_response
from repositories.database import get_db
from services.answer_service import AnswerService
from services.vote_service import VoteService

router = APIRouter(prefix="/answers", tags=["answers"])


@router.get("/question/{question_id}")
def get_answers_for_question(
    question_id: int,
    page: PageParam = 1,
    limit: LimitParam = 10,
    sort_by: str = Query("votes", alias="sortBy"),
    order: str = "desc",
    db: Session = Depends(get_db),
) -> dict:
    """Answers of a question, accepted first, then by ``sortBy``."""
    answers, total = AnswerService.list_for_question(
        db, question_id, page, limit, sort_by=sort_by, order=order
    )
    return api_response(
        {
            "answers": [schemas.AnswerOut.model_validate(a) for a in answers],
            "pagination": build_pagination(page, limit, total, "totalAnswers"),
        }
    )


@router.get("/user/{user_id}")
def get_user_answers(
    user_id: int,
    page: PageParam = 1,
    limit: LimitParam = 10,
    db: Session = Depends(get_db),
) -> dict:
    answers, total = AnswerService.list_by_user(db, user_id, page, limit)
    return api_response(
        {
            "answers": [schemas.AnswerWithQuestion.model_validate(a) for a in answers],
            "pagination": build_pagination(page, limit, total, "totalAnswers"),
        }
    )


@router.post("/{question_id}", status_code=status.HTTP_201_CREATED)
def create_answer(
    question_id: int,
    payload: schemas.BodyRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    answer = AnswerService.create_answer(db, current_user, question_id, payload.body)
    return api_response(
        {"answer": schemas.AnswerOut.model_validate(answer)},
        "Answer created successfully",
    )


@router.put("/{answer_id}")
def update_answer(
    answer_id: int,
    payload: schemas.BodyRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    answer = AnswerService.update_answer(db, current_user, answer_id, payload.body)
    return api_response(
        {"answer": schemas.AnswerOut.model_validate(answer)},
        "Answer updated successfully",
    )


@router.delete("/{answer_id}")
def delete_answer(
    answer_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    AnswerService.delete_answer(db, current_user, answer_id)
    return api_response(message="Answer deleted successfully")


@router.post("/{answer_id}/vote")
def vote_answer(
    answer_id: int,
    payload: schemas.VoteRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    new_votes = VoteService.vote_answer(db, current_user, answer_id, payload.vote_type)
    return api_response(
        {"answerId": answer_id, "newVoteCount": new_votes},
        VoteService.vote_message(db_models.ContentType.ANSWER, str(payload.vote_type)),
    )


@router.post("/{answer_id}/accept")
def accept_answer(
    answer_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    """Accept an answer. Only the question owner may do this."""
    answer = AnswerService.accept_answer(db, current_user, answer_id)
    return api_response(
        {"answer": schemas.AnswerOut.model_validate(answer)},
        "Answer accepted successfully",
    )
