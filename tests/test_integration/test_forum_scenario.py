"""
End-to-end forum flow through the public API.

1. Two users register
2. Alice asks a question, Bob answers it
3. Alice upvotes and accepts Bob's answer
4. Bob sees the notifications and the reputation he earned
5. Alice deletes the question and everything attached goes with it
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import repositories.db_models as db_models


def _register(client: TestClient, username: str) -> tuple[dict, dict]:
    response = client.post(
        "/api/auth/register",
        json={
            "username": username,
            "email": f"{username}@x.com",
            "password": "Secret123!",
        },
    )
    assert response.status_code == 201
    data = response.json()["data"]
    return data["user"], {"Authorization": f"Bearer {data['token']}"}


def test_question_answer_vote_accept_flow(client: TestClient, db_session: Session):
    """Registration through acceptance, checking counters and reputation."""
    alice, alice_headers = _register(client, "alice")
    bob, bob_headers = _register(client, "bob")

    asked = client.post(
        "/api/questions",
        json={"title": "How to X", "body": "details", "tags": ["x"]},
        headers=alice_headers,
    )
    assert asked.status_code == 201
    question_id = asked.json()["data"]["question"]["id"]

    answered = client.post(
        f"/api/answers/{question_id}", json={"body": "try Y"}, headers=bob_headers
    )
    assert answered.status_code == 201
    answer_id = answered.json()["data"]["answer"]["id"]

    voted = client.post(
        f"/api/answers/{answer_id}/vote",
        json={"voteType": "up"},
        headers=alice_headers,
    )
    assert voted.status_code == 200
    assert voted.json()["data"]["newVoteCount"] == 1

    bob_profile = client.get(f"/api/users/{bob['id']}").json()["data"]
    assert bob_profile["user"]["reputation"] == 10

    accepted = client.post(f"/api/answers/{answer_id}/accept", headers=alice_headers)
    assert accepted.status_code == 200

    detail = client.get(f"/api/questions/{question_id}").json()["data"]["question"]
    assert detail["answerCount"] == 1
    assert detail["answers"][0]["isAccepted"] is True
    assert detail["answers"][0]["votes"] == 1

    bob_notifications = client.get(
        "/api/users/notifications", headers=bob_headers
    ).json()["data"]
    assert {n["type"] for n in bob_notifications["notifications"]} == {
        "answer_upvote",
        "answer_accepted",
    }
    alice_notifications = client.get(
        "/api/users/notifications", headers=alice_headers
    ).json()["data"]
    assert [n["type"] for n in alice_notifications["notifications"]] == ["new_answer"]

    breakdown = client.get(f"/api/users/{bob['id']}/reputation").json()["data"]
    assert breakdown["reputationBreakdown"]["totalReputation"] == 25
    assert breakdown["reputationBreakdown"]["fromAcceptedAnswers"] == 15
    assert alice["reputation"] == 0


def test_question_delete_removes_thread(client: TestClient, db_session: Session):
    """Deleting a question clears answers, comments, bookmarks and reports."""
    _, alice_headers = _register(client, "alice")
    _, bob_headers = _register(client, "bob")

    question_id = client.post(
        "/api/questions",
        json={"title": "Short lived", "body": "soon gone"},
        headers=alice_headers,
    ).json()["data"]["question"]["id"]
    answer_id = client.post(
        f"/api/answers/{question_id}", json={"body": "an answer"}, headers=bob_headers
    ).json()["data"]["answer"]["id"]
    client.post(
        f"/api/comments/answer/{answer_id}",
        json={"body": "a comment"},
        headers=alice_headers,
    )
    client.post(f"/api/bookmarks/{question_id}", headers=bob_headers)
    client.post(
        "/api/admin/reports",
        json={"contentId": answer_id, "contentType": "answer", "reason": "off-topic"},
        headers=alice_headers,
    )

    deleted = client.delete(f"/api/questions/{question_id}", headers=alice_headers)
    assert deleted.status_code == 200

    assert client.get(f"/api/questions/{question_id}").status_code == 404
    answers = client.get(f"/api/answers/question/{question_id}").json()["data"]
    assert answers["answers"] == []
    assert answers["pagination"]["totalAnswers"] == 0
    for model in (
        db_models.Answer,
        db_models.Comment,
        db_models.Bookmark,
        db_models.Report,
    ):
        assert db_session.query(model).count() == 0
    bookmarks = client.get("/api/bookmarks", headers=bob_headers).json()["data"]
    assert bookmarks["pagination"]["totalBookmarks"] == 0
