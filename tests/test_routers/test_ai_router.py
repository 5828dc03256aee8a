"""Integration tests for AI suggestion endpoints with a stub text generator."""

import pytest

from main import app
from services.ai_service import TextGenerator, get_text_generator

QUESTION = {
    "questionTitle": "How do I debounce input in React?",
    "questionBody": "My search box fires a request on every keystroke.",
    "tags": ["react"],
}


class StubGenerator(TextGenerator):
    """Returns a fixed reply and remembers the prompts it received."""

    model = "stub-model"

    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


@pytest.fixture
def use_generator(client):
    """Install a StubGenerator with the given reply for the current test."""

    def _install(reply: str) -> StubGenerator:
        generator = StubGenerator(reply)
        app.dependency_overrides[get_text_generator] = lambda: generator
        return generator

    yield _install
    app.dependency_overrides.pop(get_text_generator, None)


class TestStatus:
    def test_status_without_key(self, client):
        response = client.get("/api/ai/status")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "configured": False,
            "status": "AI not configured",
            "model": "gemini-1.5-flash",
        }

    def test_status_with_generator(self, client, use_generator):
        use_generator("unused")

        response = client.get("/api/ai/status")

        assert response.json()["configured"] is True
        assert response.json()["status"] == "AI operational"


class TestSuggestions:
    def test_unconfigured_ai_returns_503(self, client, auth_headers):
        response = client.post(
            "/api/ai/answer-suggestion", json=QUESTION, headers=auth_headers
        )

        assert response.status_code == 503
        assert response.json()["message"] == "AI service not configured"

    def test_answer_suggestion(self, client, auth_headers, use_generator):
        generator = use_generator("Use a debounce hook.")

        response = client.post(
            "/api/ai/answer-suggestion", json=QUESTION, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"] == {
            "suggestion": "Use a debounce hook.",
            "confidence": "high",
            "model": "stub-model",
        }
        assert "Tags: react" in generator.prompts[0]

    def test_answer_suggestion_requires_auth(self, client, use_generator):
        use_generator("x")

        response = client.post("/api/ai/answer-suggestion", json=QUESTION)

        assert response.status_code == 401

    def test_validation_runs_before_configuration_check(self, client, auth_headers):
        response = client.post(
            "/api/ai/tag-suggestions",
            json={"questionTitle": "Only a title"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide question title and body"

    def test_tag_suggestions_are_parsed(self, client, auth_headers, use_generator):
        use_generator("Tags: React, Hooks, , Performance, JavaScript, Frontend, Extra")

        response = client.post(
            "/api/ai/tag-suggestions", json=QUESTION, headers=auth_headers
        )

        assert response.json()["data"]["suggestedTags"] == [
            "react",
            "hooks",
            "performance",
            "javascript",
            "frontend",
        ]

    def test_chatbot(self, client, auth_headers, use_generator):
        generator = use_generator("Hello there")

        response = client.post(
            "/api/ai/chatbot",
            json={"message": "Hi", "context": "New user"},
            headers=auth_headers,
        )

        data = response.json()["data"]
        assert data["response"] == "Hello there"
        assert data["timestamp"]
        assert "Context: New user" in generator.prompts[0]

    def test_chatbot_requires_message(self, client, auth_headers, use_generator):
        use_generator("x")

        response = client.post(
            "/api/ai/chatbot", json={"message": "   "}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide a message"

    def test_question_improvements(self, client, auth_headers, use_generator):
        use_generator("Add a code sample.")

        response = client.post(
            "/api/ai/question-improvements", json=QUESTION, headers=auth_headers
        )

        assert response.json()["data"]["improvements"] == "Add a code sample."

    def test_similar_questions_is_public(self, client, use_generator):
        use_generator(
            "Similar questions:\n\nHow to throttle input?\n"
            "Based on the topic\nWhat is useDeferredValue?\n"
        )

        response = client.post(
            "/api/ai/similar-questions",
            json={"questionTitle": QUESTION["questionTitle"]},
        )

        assert response.status_code == 200
        assert response.json()["data"]["similarQuestions"] == [
            "How to throttle input?",
            "What is useDeferredValue?",
        ]

    def test_similar_questions_requires_title(self, client, use_generator):
        use_generator("x")

        response = client.post("/api/ai/similar-questions", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide question title"
