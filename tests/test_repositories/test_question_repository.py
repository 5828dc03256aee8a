"""Tests for QuestionRepository."""

import repositories.db_models as db_models
from repositories.question_repository import QuestionRepository


def _question(db_session, user, title, tags=(), **fields):
    question = db_models.Question(
        user_id=user.id, title=title, body=f"{title} body", **fields
    )
    question.tag_links = [db_models.QuestionTag(name=name) for name in tags]
    db_session.add(question)
    db_session.commit()
    return question


class TestListQuestions:
    def test_any_tag_matches(self, db_session, test_user):
        _question(db_session, test_user, "A", tags=["python"])
        _question(db_session, test_user, "B", tags=["sql"])
        _question(db_session, test_user, "C", tags=["rust"])

        questions, total = QuestionRepository(db_session).list_questions(
            1, 10, tags=["python", "sql"]
        )

        assert total == 2
        assert sorted(q.title for q in questions) == ["A", "B"]

    def test_unknown_sort_key_falls_back(self, db_session, test_user):
        _question(db_session, test_user, "First")
        _question(db_session, test_user, "Second")

        questions, _ = QuestionRepository(db_session).list_questions(
            1, 10, sort_by="title; DROP TABLE users"
        )

        assert {q.title for q in questions} == {"First", "Second"}

    def test_sort_by_answer_count(self, db_session, test_user):
        _question(db_session, test_user, "Quiet", answer_count=0)
        _question(db_session, test_user, "Busy", answer_count=3)

        questions, _ = QuestionRepository(db_session).list_questions(
            1, 10, sort_by="answers"
        )

        assert [q.title for q in questions] == ["Busy", "Quiet"]

    def test_pages_do_not_overlap(self, db_session, test_user):
        for i in range(5):
            _question(db_session, test_user, f"Q{i}", votes=1)
        repo = QuestionRepository(db_session)

        first, total = repo.list_questions(1, 3, sort_by="votes")
        second, _ = repo.list_questions(2, 3, sort_by="votes")

        assert total == 5
        assert len(second) == 2
        assert not {q.id for q in first} & {q.id for q in second}


class TestTags:
    def test_replace_keeps_surviving_links(self, db_session, test_question):
        repo = QuestionRepository(db_session)
        kept_id = test_question.tag_links[0].id

        repo.replace_tags(test_question, ["python", "orm"])
        db_session.commit()

        db_session.refresh(test_question)
        assert test_question.tags == ["python", "orm"]
        assert test_question.tag_links[0].id == kept_id

    def test_popular_tags(self, db_session, test_user):
        _question(db_session, test_user, "A", tags=["python", "sql"])
        _question(db_session, test_user, "B", tags=["python"])

        assert QuestionRepository(db_session).popular_tags(limit=2) == [
            ("python", 2),
            ("sql", 1),
        ]


class TestCounters:
    def test_increment_and_stats(self, db_session, test_user, test_question):
        repo = QuestionRepository(db_session)

        repo.increment(test_question.id, votes=3, views=10)
        repo.commit()

        assert repo.vote_stats_for_user(test_user.id) == (1, 3, 10, 3.0)

    def test_stats_for_user_without_questions(self, db_session, other_user):
        assert QuestionRepository(db_session).vote_stats_for_user(other_user.id) == (
            0,
            0,
            0,
            0.0,
        )
