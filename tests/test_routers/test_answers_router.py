"""Integration tests for answer API endpoints."""

import repositories.db_models as db_models


class TestCreateAnswer:
    def test_create_answer_bumps_counter_and_notifies(
        self, client, db_session, other_auth_headers, test_question, test_user
    ):
        response = client.post(
            f"/api/answers/{test_question.id}",
            json={"body": "  Use a context manager.  "},
            headers=other_auth_headers,
        )

        assert response.status_code == 201
        answer = response.json()["data"]["answer"]
        assert answer["body"] == "Use a context manager."
        assert answer["isAccepted"] is False
        assert answer["questionId"] == test_question.id

        db_session.refresh(test_question)
        assert test_question.answer_count == 1
        notification = db_session.query(db_models.Notification).one()
        assert notification.recipient_id == test_user.id
        assert notification.title == "New Answer"

    def test_answering_own_question_does_not_notify(
        self, client, db_session, auth_headers, test_question
    ):
        client.post(
            f"/api/answers/{test_question.id}",
            json={"body": "Answering myself"},
            headers=auth_headers,
        )

        assert db_session.query(db_models.Notification).count() == 0

    def test_empty_body_rejected(self, client, other_auth_headers, test_question):
        response = client.post(
            f"/api/answers/{test_question.id}",
            json={"body": "   "},
            headers=other_auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide answer body"

    def test_unknown_question(self, client, other_auth_headers):
        response = client.post(
            "/api/answers/99999", json={"body": "hello"}, headers=other_auth_headers
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Question not found"


class TestListAnswers:
    def test_accepted_answer_listed_first(
        self, client, db_session, test_question, test_answer, make_user
    ):
        helper = make_user("helper")
        popular = db_models.Answer(
            question_id=test_question.id, user_id=helper.id, body="Popular", votes=9
        )
        db_session.add(popular)
        db_session.commit()
        accepted_id = test_answer.id
        db_session.query(db_models.Answer).filter_by(id=accepted_id).update(
            {"is_accepted": True}
        )
        db_session.commit()

        response = client.get(f"/api/answers/question/{test_question.id}")

        data = response.json()["data"]
        assert [a["body"] for a in data["answers"]] == [
            "Use a sessionmaker bound to your engine.",
            "Popular",
        ]
        assert data["pagination"]["totalAnswers"] == 2

    def test_list_for_missing_question_is_empty(self, client):
        response = client.get("/api/answers/question/12345")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["answers"] == []
        assert data["pagination"]["totalAnswers"] == 0

    def test_list_after_question_deleted(
        self, client, auth_headers, test_question, test_answer
    ):
        question_id = test_question.id
        deleted = client.delete(f"/api/questions/{question_id}", headers=auth_headers)
        assert deleted.status_code == 200

        response = client.get(f"/api/answers/question/{question_id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["answers"] == []
        assert data["pagination"]["totalAnswers"] == 0
        assert data["pagination"]["totalPages"] == 0

    def test_user_answers_include_question_reference(
        self, client, test_answer, test_question, other_user
    ):
        response = client.get(f"/api/answers/user/{other_user.id}")

        answers = response.json()["data"]["answers"]
        assert len(answers) == 1
        assert answers[0]["question"] == {
            "id": test_question.id,
            "title": test_question.title,
        }


class TestUpdateAndDeleteAnswer:
    def test_author_updates_answer(self, client, other_auth_headers, test_answer):
        response = client.put(
            f"/api/answers/{test_answer.id}",
            json={"body": "Edited"},
            headers=other_auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["answer"]["body"] == "Edited"

    def test_non_author_cannot_update(self, client, auth_headers, test_answer):
        response = client.put(
            f"/api/answers/{test_answer.id}",
            json={"body": "Edited"},
            headers=auth_headers,
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized to update this answer"

    def test_delete_decrements_answer_count(
        self, client, db_session, other_auth_headers, test_question, test_answer
    ):
        question_id = test_question.id
        answer_id = test_answer.id

        response = client.delete(
            f"/api/answers/{answer_id}", headers=other_auth_headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Answer deleted successfully"
        question = db_session.get(db_models.Question, question_id)
        db_session.refresh(question)
        assert question.answer_count == 0
        assert (
            db_session.query(db_models.Answer).filter_by(id=answer_id).first() is None
        )


class TestVoteAnswer:
    def test_upvote_answer_gives_ten_reputation(
        self, client, db_session, auth_headers, test_answer, other_user
    ):
        response = client.post(
            f"/api/answers/{test_answer.id}/vote",
            json={"voteType": "up"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Answer upvoted successfully"
        assert response.json()["data"]["newVoteCount"] == 1
        db_session.refresh(other_user)
        assert other_user.reputation == 10

    def test_downvote_answer_costs_five_reputation(
        self, client, db_session, auth_headers, test_answer, other_user
    ):
        client.post(
            f"/api/answers/{test_answer.id}/vote",
            json={"voteType": "down"},
            headers=auth_headers,
        )

        db_session.refresh(other_user)
        assert other_user.reputation == -5

    def test_cannot_vote_own_answer(self, client, other_auth_headers, test_answer):
        response = client.post(
            f"/api/answers/{test_answer.id}/vote",
            json={"voteType": "up"},
            headers=other_auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot vote on your own answer"


class TestAcceptAnswer:
    def test_question_owner_accepts(
        self, client, db_session, auth_headers, test_answer, other_user
    ):
        response = client.post(
            f"/api/answers/{test_answer.id}/accept", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["answer"]["isAccepted"] is True
        db_session.refresh(other_user)
        assert other_user.reputation == 15

    def test_accepting_twice_awards_bonus_once(
        self, client, db_session, auth_headers, test_answer, other_user
    ):
        client.post(f"/api/answers/{test_answer.id}/accept", headers=auth_headers)
        client.post(f"/api/answers/{test_answer.id}/accept", headers=auth_headers)

        db_session.refresh(other_user)
        assert other_user.reputation == 15

    def test_accepting_another_answer_moves_the_flag(
        self, client, db_session, auth_headers, test_question, test_answer, make_user
    ):
        helper = make_user("helper")
        second = db_models.Answer(
            question_id=test_question.id, user_id=helper.id, body="Second"
        )
        db_session.add(second)
        db_session.commit()
        first_id, second_id = test_answer.id, second.id

        client.post(f"/api/answers/{first_id}/accept", headers=auth_headers)
        client.post(f"/api/answers/{second_id}/accept", headers=auth_headers)

        accepted = (
            db_session.query(db_models.Answer.id)
            .filter(db_models.Answer.is_accepted == True)  # noqa: E712
            .all()
        )
        assert [row[0] for row in accepted] == [second_id]

    def test_non_owner_cannot_accept(self, client, other_auth_headers, test_answer):
        response = client.post(
            f"/api/answers/{test_answer.id}/accept", headers=other_auth_headers
        )

        assert response.status_code == 403
        assert response.json()["message"] == (
            "Only the question owner can accept answers"
        )
