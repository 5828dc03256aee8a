"""Tests for AdminService and the dashboard helpers."""

import pytest

import repositories.db_models as db_models
from models.exceptions import (
    BusinessRuleException,
    DuplicateReportException,
    ReportNotFoundException,
    UserNotFoundException,
    ValidationException,
)
from services.admin_service import (
    AdminService,
    growth_rate,
    health_score,
    round_half_up,
)


class TestHelpers:
    @pytest.mark.parametrize(
        "current, previous, expected",
        [
            (0, 0, 0),
            (3, 0, 100),
            (6, 3, 100),
            (1, 4, -75),
            (5, 5, 0),
            (1, 8, -87),
            (9, 8, 13),
        ],
    )
    def test_growth_rate(self, current, previous, expected):
        assert growth_rate(current, previous) == expected

    @pytest.mark.parametrize("value, expected", [(2.5, 3), (-2.5, -2), (0.49, 0)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_health_score_is_capped(self):
        assert health_score(100, 100, 5.0, 0) == 100

    def test_health_score_penalizes_pending_reports(self):
        calm = health_score(0, 0, 0, 0)
        busy = health_score(0, 0, 0, 10)

        assert calm == 100
        assert busy == 50
        assert health_score(0, 0, 0, 40) == 0


class TestReports:
    def test_create_report_strips_reason(self, db_session, other_user, test_question):
        report = AdminService.create_report(
            db_session, other_user, test_question.id, "question", "  spam  "
        )

        assert report.reason == "spam"
        assert report.status == db_models.ReportStatus.PENDING

    def test_same_content_reported_by_two_users(
        self, db_session, other_user, admin_user, test_question
    ):
        AdminService.create_report(
            db_session, other_user, test_question.id, "question", "spam"
        )
        AdminService.create_report(
            db_session, admin_user, test_question.id, "question", "spam"
        )

        assert db_session.query(db_models.Report).count() == 2

    def test_duplicate_report(self, db_session, other_user, test_question):
        AdminService.create_report(
            db_session, other_user, test_question.id, "question", "spam"
        )

        with pytest.raises(DuplicateReportException):
            AdminService.create_report(
                db_session, other_user, test_question.id, "question", "again"
            )

    def test_dismiss_marks_resolved(
        self, db_session, admin_user, other_user, test_question
    ):
        report = AdminService.create_report(
            db_session, other_user, test_question.id, "question", "spam"
        )

        snapshot = AdminService.resolve_report(
            db_session, admin_user, report.id, "dismiss"
        )

        db_session.refresh(report)
        assert report.status == db_models.ReportStatus.RESOLVED
        assert report.resolved_by_id == admin_user.id
        assert snapshot.status == db_models.ReportStatus.RESOLVED

    def test_delete_when_content_already_gone(
        self, db_session, admin_user, other_user, test_question
    ):
        report = AdminService.create_report(
            db_session, other_user, test_question.id, "question", "spam"
        )
        report_id = report.id
        db_session.query(db_models.QuestionTag).delete()
        db_session.query(db_models.Question).delete()
        db_session.commit()

        snapshot = AdminService.resolve_report(
            db_session, admin_user, report_id, "delete"
        )

        assert snapshot.id == report_id
        db_session.refresh(report)
        assert report.status == db_models.ReportStatus.RESOLVED

    def test_resolve_missing_report(self, db_session, admin_user):
        with pytest.raises(ReportNotFoundException):
            AdminService.resolve_report(db_session, admin_user, 1, "dismiss")

    def test_list_reports_invalid_type(self, db_session):
        with pytest.raises(ValidationException, match="Invalid content type"):
            AdminService.list_reports(db_session, 1, 20, content_type="poll")


class TestManageUser:
    @pytest.mark.parametrize(
        "action, attribute, value",
        [
            ("promote", "is_admin", True),
            ("verify", "is_verified", True),
            ("unverify", "is_verified", False),
            ("ban", "is_banned", True),
            ("suspend", "is_suspended", True),
        ],
    )
    def test_flag_actions(self, db_session, admin_user, other_user, action, attribute, value):
        user = AdminService.manage_user(db_session, admin_user, other_user.id, action)

        assert getattr(user, attribute) is value

    def test_unban_reverses_ban(self, db_session, admin_user, make_user):
        banned = make_user("banned", is_banned=True)

        user = AdminService.manage_user(db_session, admin_user, banned.id, "unban")

        assert user.is_banned is False

    def test_missing_user(self, db_session, admin_user):
        with pytest.raises(UserNotFoundException):
            AdminService.manage_user(db_session, admin_user, 999, "ban")

    def test_self_modification_refused(self, db_session, admin_user):
        with pytest.raises(BusinessRuleException):
            AdminService.manage_user(db_session, admin_user, admin_user.id, "demote")


class TestStats:
    def test_empty_database(self, db_session):
        stats = AdminService.get_stats(db_session)

        assert stats["totals"] == {
            "users": 0,
            "questions": 0,
            "answers": 0,
            "comments": 0,
            "reports": 0,
        }
        assert stats["contentStats"]["answers"]["averagePerQuestion"] == 0
        assert stats["growth"]["users"] == {
            "today": 0,
            "yesterday": 0,
            "growthRate": 0,
            "trend": "stable",
        }

    def test_counts_and_rates(
        self, db_session, test_question, test_answer, unverified_user, test_user
    ):
        AdminService.create_report(
            db_session, test_user, test_answer.id, "answer", "wrong"
        )

        stats = AdminService.get_stats(db_session)

        assert stats["userStats"]["total"] == 3
        assert stats["userStats"]["unverified"] == 1
        assert stats["userStats"]["verificationRate"] == 67
        assert stats["contentStats"]["answers"]["averagePerQuestion"] == 1.0
        assert stats["reports"]["pending"] == 1
        assert stats["systemHealth"]["moderationLoad"] == 1
        assert stats["growth"]["questions"]["trend"] == "up"
        most_active = stats["topPerformers"]["mostActiveUsers"]
        assert {u["username"] for u in most_active} >= {"testuser", "otheruser"}
