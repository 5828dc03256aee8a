"""AI-assisted suggestions for questions.

The model is reached through a one-method ``TextGenerator`` so routes and
tests never depend on a particular provider. Gemini is the production
provider; a missing API key disables the feature with a 503.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from loguru import logger

from helpers.time_utils import utc_now
from models.config import settings
from models.exceptions import (
    AIServiceNotConfiguredException,
    ExternalServiceException,
    ValidationException,
)

MAX_TAG_SUGGESTIONS = 5
MAX_SIMILAR_QUESTIONS = 5
SKIPPED_LINE_PREFIXES = ("Similar", "Based")


class TextGenerator(ABC):
    """Abstract base class for text generation providers."""

    model: str = ""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Return the model's completion for a prompt."""
        pass


class GeminiTextGenerator(TextGenerator):
    """Gemini through the ``google-generativeai`` SDK."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        timeout: float = 30.0,
    ) -> None:
        self.model = model
        self.timeout = timeout
        genai.configure(api_key=api_key)
        self._model = genai.GenerativeModel(model)

    def generate(self, prompt: str) -> str:
        try:
            response = self._model.generate_content(
                prompt, request_options={"timeout": self.timeout}
            )
            # .text raises ValueError when the reply was blocked or empty
            return response.text
        except (
            google_exceptions.GoogleAPIError,
            genai.types.BlockedPromptException,
            ValueError,
        ) as e:
            logger.error(f"Gemini request failed: {e}")
            raise ExternalServiceException("AI service request failed")


def get_text_generator() -> Optional[TextGenerator]:
    """Provider from settings, or None when no API key is configured."""
    if not settings.ai_configured:
        return None
    return GeminiTextGenerator(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        timeout=settings.AI_REQUEST_TIMEOUT,
    )


# Prompts


def answer_prompt(title: str, body: str, tags: Optional[List[str]]) -> str:
    tag_line = f"Tags: {', '.join(tags)}" if tags else ""
    return f"""You are an expert programmer and technical assistant. Please provide a helpful, accurate, and well-structured answer to the following programming question:

Title: {title}

Question: {body}

{tag_line}

Please provide:
1. A clear, step-by-step solution
2. Code examples if applicable
3. Best practices and common pitfalls to avoid
4. Additional resources or documentation links if relevant

Keep the answer concise but comprehensive, suitable for a Q&A platform."""


def tags_prompt(title: str, body: str) -> str:
    return f"""Based on the following programming question, suggest 3-5 relevant tags that would help categorize this question:

Title: {title}
Question: {body}

Please provide only the tag names, separated by commas. Focus on programming languages, frameworks and libraries, technologies and general topics.

Example format: javascript, react, debugging, api, frontend

Tags:"""


def chat_prompt(message: str, context: Optional[str]) -> str:
    context_line = f"Context: {context}" if context else ""
    return f"""You are a helpful programming assistant for a Q&A platform. Please provide a helpful, accurate response to the user's question or request.

{context_line}

User: {message}

Please provide a clear, concise, and helpful response. If it's a coding question, include relevant code examples."""


def improvements_prompt(title: str, body: str, tags: Optional[List[str]]) -> str:
    tag_line = f"Current Tags: {', '.join(tags)}" if tags else ""
    return f"""Please analyze the following programming question and provide suggestions for improvement:

Title: {title}
Question: {body}
{tag_line}

Please provide feedback on:
1. Title clarity and specificity
2. Question structure and completeness
3. Missing information that would help answerers
4. Code formatting suggestions (if applicable)
5. Tag suggestions for better categorization

Format your response as constructive feedback that helps the user improve their question."""


def similar_prompt(title: str, body: Optional[str]) -> str:
    description = f"Description: {body}" if body else ""
    return f"""Based on this programming question, generate 3-5 similar question titles that someone might ask:

Title: {title}
{description}

Please provide similar but distinct questions that are related to the same topic, technology, or problem domain.
Format as a simple list, one question per line."""


# Output parsing


def parse_tags(text: str) -> List[str]:
    """
    Turn a comma-separated model reply into at most five lowercase tags.

    >>> parse_tags("Tags: Python, FastAPI, , sql")
    ['python', 'fastapi', 'sql']
    """
    cleaned = text.replace("Tags:", "", 1).strip()
    tags = [tag.strip().lower() for tag in cleaned.split(",")]
    return [tag for tag in tags if tag][:MAX_TAG_SUGGESTIONS]


def parse_similar(text: str) -> List[str]:
    """One question per non-empty line, skipping the model's preamble lines."""
    lines = [line.strip() for line in text.split("\n")]
    return [
        line
        for line in lines
        if line and not line.startswith(SKIPPED_LINE_PREFIXES)
    ][:MAX_SIMILAR_QUESTIONS]


class AIService:
    """Service for AI suggestions."""

    @staticmethod
    def status(generator: Optional[TextGenerator]) -> dict:
        configured = generator is not None
        return {
            "configured": configured,
            "status": "AI operational" if configured else "AI not configured",
            "model": settings.GEMINI_MODEL,
        }

    @staticmethod
    def _require(generator: Optional[TextGenerator]) -> TextGenerator:
        if generator is None:
            raise AIServiceNotConfiguredException()
        return generator

    @staticmethod
    def _require_title_and_body(title: Optional[str], body: Optional[str]) -> None:
        if not (title or "").strip() or not (body or "").strip():
            raise ValidationException("Please provide question title and body")

    @staticmethod
    def answer_suggestion(
        generator: Optional[TextGenerator],
        title: Optional[str],
        body: Optional[str],
        tags: Optional[List[str]] = None,
    ) -> dict:
        AIService._require_title_and_body(title, body)
        generator = AIService._require(generator)
        suggestion = generator.generate(answer_prompt(title, body, tags))
        return {"suggestion": suggestion, "confidence": "high", "model": generator.model}

    @staticmethod
    def tag_suggestions(
        generator: Optional[TextGenerator], title: Optional[str], body: Optional[str]
    ) -> dict:
        AIService._require_title_and_body(title, body)
        generator = AIService._require(generator)
        reply = generator.generate(tags_prompt(title, body))
        return {"suggestedTags": parse_tags(reply), "model": generator.model}

    @staticmethod
    def chatbot(
        generator: Optional[TextGenerator],
        message: Optional[str],
        context: Optional[str] = None,
    ) -> dict:
        if not (message or "").strip():
            raise ValidationException("Please provide a message")
        generator = AIService._require(generator)
        reply = generator.generate(chat_prompt(message, context))
        return {"response": reply, "timestamp": utc_now(), "model": generator.model}

    @staticmethod
    def question_improvements(
        generator: Optional[TextGenerator],
        title: Optional[str],
        body: Optional[str],
        tags: Optional[List[str]] = None,
    ) -> dict:
        AIService._require_title_and_body(title, body)
        generator = AIService._require(generator)
        improvements = generator.generate(improvements_prompt(title, body, tags))
        return {"improvements": improvements, "model": generator.model}

    @staticmethod
    def similar_questions(
        generator: Optional[TextGenerator], title: Optional[str], body: Optional[str]
    ) -> dict:
        if not (title or "").strip():
            raise ValidationException("Please provide question title")
        generator = AIService._require(generator)
        reply = generator.generate(similar_prompt(title, body))
        return {"similarQuestions": parse_similar(reply), "model": generator.model}
