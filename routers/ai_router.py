"""AI suggestion router endpoints.

``/status`` and ``/similar-questions`` are public; the rest need a signed-in
user. The text generator is a dependency so tests can swap the provider.
"""

from typing import Optional

from fastapi import APIRouter, Depends

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.responses import api_response
from services.ai_service import AIService, TextGenerator, get_text_generator

router = APIRouter(prefix="/ai", tags=["ai"])


@router.get("/status")
async def get_status(
    generator: Optional[TextGenerator] = Depends(get_text_generator),
) -> dict:
    return {"success": True, **AIService.status(generator)}


@router.post("/similar-questions")
def similar_questions(
    payload: schemas.AIQuestionRequest,
    generator: Optional[TextGenerator] = Depends(get_text_generator),
) -> dict:
    return api_response(
        AIService.similar_questions(
            generator, payload.question_title, payload.question_body
        )
    )


@router.post("/answer-suggestion")
def answer_suggestion(
    payload: schemas.AIQuestionRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    generator: Optional[TextGenerator] = Depends(get_text_generator),
) -> dict:
    return api_response(
        AIService.answer_suggestion(
            generator, payload.question_title, payload.question_body, payload.tags
        )
    )


@router.post("/tag-suggestions")
def tag_suggestions(
    payload: schemas.AIQuestionRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    generator: Optional[TextGenerator] = Depends(get_text_generator),
) -> dict:
    return api_response(
        AIService.tag_suggestions(
            generator, payload.question_title, payload.question_body
        )
    )


@router.post("/chatbot")
def chatbot(
    payload: schemas.ChatbotRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    generator: Optional[TextGenerator] = Depends(get_text_generator),
) -> dict:
    return api_response(AIService.chatbot(generator, payload.message, payload.context))


@router.post("/question-improvements")
def question_improvements(
    payload: schemas.AIQuestionRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    generator: Optional[TextGenerator] = Depends(get_text_generator),
) -> dict:
    return api_response(
        AIService.question_improvements(
            generator, payload.question_title, payload.question_body, payload.tags
        )
    )
