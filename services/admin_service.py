"""
Admin Service

Reports, moderation actions, user management and the dashboard statistics.
"""

import math
from datetime import timedelta
from typing import Callable, List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import days_ago, start_of_day, utc_now
from models.exceptions import (
    BusinessRuleException,
    DuplicateReportException,
    NotFoundException,
    ReportNotFoundException,
    UserNotFoundException,
    ValidationException,
)
from repositories.answer_repository import AnswerRepository
from repositories.comment_repository import CommentRepository
from repositories.question_repository import QuestionRepository
from repositories.report_repository import ReportRepository
from repositories.user_repository import UserRepository
from services.content_service import ContentService
from services.password_reset_service import PasswordResetService

ContentType = db_models.ContentType
ReportStatus = db_models.ReportStatus
User = db_models.User
Question = db_models.Question
Answer = db_models.Answer
Comment = db_models.Comment
Report = db_models.Report

RESOLVE_ACTIONS = ("dismiss", "delete")


def _set_flag(attribute: str, value: bool) -> Callable[[Session, User], None]:
    def apply(db: Session, user: User) -> None:
        setattr(user, attribute, value)

    return apply


def _reset_password(db: Session, user: User) -> None:
    PasswordResetService.issue_reset_token(db, user)


USER_ACTIONS: dict[str, Callable[[Session, User], None]] = {
    "promote": _set_flag("is_admin", True),
    "demote": _set_flag("is_admin", False),
    "verify": _set_flag("is_verified", True),
    "unverify": _set_flag("is_verified", False),
    "ban": _set_flag("is_banned", True),
    "unban": _set_flag("is_banned", False),
    "suspend": _set_flag("is_suspended", True),
    "unsuspend": _set_flag("is_suspended", False),
    "reset_password": _reset_password,
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (-87.5 -> -87)."""
    return math.floor(value + 0.5)


def growth_rate(current: int, previous: int) -> int:
    """Day-over-day change in percent."""
    if previous == 0:
        return 100 if current > 0 else 0
    return round_half_up((current - previous) / previous * 100)


def _trend(rate: int) -> str:
    if rate > 0:
        return "up"
    if rate < 0:
        return "down"
    return "stable"


def _percent(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def health_score(
    verification_rate: int,
    acceptance_rate: int,
    answers_per_question: float,
    pending_reports: int,
) -> int:
    """Composite 0-100 score shown on the dashboard."""
    return min(
        100,
        round_half_up(
            verification_rate * 0.3
            + acceptance_rate * 0.3
            + min(answers_per_question * 20, 40)
            + max(0, 100 - pending_reports * 5)
        ),
    )


class AdminService:
    """Service for moderation and administration."""

    @staticmethod
    def create_report(
        db: Session,
        reporter: User,
        content_id: Optional[int],
        content_type: Optional[str],
        reason: Optional[str],
    ) -> db_models.Report:
        """
        File a report against a question, answer or comment.

        Raises:
            ValidationException: On missing fields or an unknown content type
            NotFoundException: If the content does not exist
            DuplicateReportException: If the user already reported it
        """
        reason = (reason or "").strip()
        if not content_id or not content_type or not reason:
            raise ValidationException("Please provide contentId, contentType, and reason")

        kind = ContentService.parse_content_type(content_type)
        ContentService.get_content(db, kind, content_id)

        repo = ReportRepository(db)
        if repo.get_existing(reporter.id, kind, content_id):
            raise DuplicateReportException()

        report = repo.create(
            db_models.Report(
                reporter_id=reporter.id,
                content_type=kind,
                content_id=content_id,
                reason=reason,
            )
        )
        logger.info(f"User {reporter.id} reported {kind.value} {content_id}")
        return report

    @staticmethod
    def list_reports(
        db: Session,
        page: int,
        limit: int,
        status: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> tuple[List[db_models.Report], int]:
        """
        Raises:
            ValidationException: On an unknown status or content type
        """
        status_filter = None
        if status:
            try:
                status_filter = ReportStatus(status)
            except ValueError:
                raise ValidationException("Invalid report status")
        type_filter = (
            ContentService.parse_content_type(content_type) if content_type else None
        )
        return ReportRepository(db).list_reports(
            page, limit, status=status_filter, content_type=type_filter
        )

    @staticmethod
    def resolve_report(
        db: Session, admin: User, report_id: int, action: Optional[str]
    ) -> schemas.ReportOut:
        """
        Resolve a report, deleting the reported content when asked to.

        A delete removes every report on the content, this one included, so
        the resolved report is returned as a snapshot.

        Raises:
            ValidationException: If action is not dismiss or delete
            ReportNotFoundException: If the report does not exist
        """
        if action not in RESOLVE_ACTIONS:
            raise ValidationException('Action must be "dismiss" or "delete"')

        repo = ReportRepository(db)
        report = repo.get_by_id(report_id)
        if not report:
            raise ReportNotFoundException()

        report.status = ReportStatus.RESOLVED
        report.resolved_by_id = admin.id
        report.resolved_at = utc_now()
        snapshot = schemas.ReportOut.model_validate(report)

        try:
            # The cascade bulk-deletes this row; write the resolution first
            db.flush()
            if action == "delete":
                try:
                    ContentService.get_content(db, report.content_type, report.content_id)
                except NotFoundException:
                    logger.warning(
                        f"Reported {report.content_type.value} {report.content_id} "
                        "is already gone"
                    )
                else:
                    ContentService.stage_delete(
                        db, report.content_type, report.content_id
                    )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Admin {admin.id} resolved report {report_id} ({action})")
        return snapshot

    @staticmethod
    def delete_content(db: Session, content_type: str, content_id: int) -> int:
        """
        Raises:
            ValidationException: On an unknown content type
            NotFoundException: If the content does not exist
        """
        kind = ContentService.parse_content_type(content_type)
        deleted_id = ContentService.delete(db, kind, content_id)
        logger.info(f"Admin deleted {kind.value} {content_id}")
        return deleted_id

    @staticmethod
    def manage_user(
        db: Session, admin: User, user_id: int, action: Optional[str]
    ) -> User:
        """
        Apply one moderation action to a user.

        Raises:
            UserNotFoundException: If the user does not exist
            BusinessRuleException: If the admin targets their own account
            ValidationException: On an unknown action
        """
        repo = UserRepository(db)
        user = repo.get_by_id(user_id)
        if not user:
            raise UserNotFoundException()
        if user.id == admin.id:
            raise BusinessRuleException("Cannot modify your own account")

        handler = USER_ACTIONS.get(action or "")
        if handler is None:
            raise ValidationException("Invalid action")

        handler(db, user)
        user = repo.update(user)
        logger.info(f"Admin {admin.id} applied '{action}' to user {user.id}")
        return user

    @staticmethod
    def get_stats(db: Session) -> dict:
        """Dashboard statistics, recomputed on every call."""
        users = UserRepository(db)
        questions = QuestionRepository(db)
        answers = AnswerRepository(db)
        comments = CommentRepository(db)
        reports = ReportRepository(db)
        total_users = users.count()
        total_questions = questions.count()
        total_answers = answers.count()
        total_comments = comments.count()
        total_reports = reports.count()
        pending_reports = reports.count_where(Report.status == ReportStatus.PENDING)
        resolved_reports = reports.count_where(Report.status == ReportStatus.RESOLVED)

        verified_users = users.count_where(User.is_verified == True)  # noqa: E712
        admin_users = users.count_where(User.is_admin == True)  # noqa: E712
        answered = questions.count_where(Question.answer_count > 0)
        accepted = answers.count_where(Answer.is_accepted == True)  # noqa: E712

        now = utc_now()
        today = start_of_day(now)
        yesterday = today - timedelta(days=1)
        week_ago = days_ago(7)
        month_ago = days_ago(30)

        def window(start, end=None) -> dict:
            def between(column):
                criteria = [column >= start]
                if end is not None:
                    criteria.append(column < end)
                return criteria

            return {
                "users": users.count_where(*between(User.created_at)),
                "questions": questions.count_where(*between(Question.created_at)),
                "answers": answers.count_where(*between(Answer.created_at)),
                "comments": comments.count_where(*between(Comment.created_at)),
            }

        today_counts = window(today)
        yesterday_counts = window(yesterday, today)
        week_counts = window(week_ago)
        month_counts = window(month_ago)
        for counts in (today_counts, yesterday_counts, week_counts, month_counts):
            counts["total"] = sum(counts.values())

        growth = {}
        for kind in ("users", "questions", "answers"):
            rate = growth_rate(today_counts[kind], yesterday_counts[kind])
            growth[kind] = {
                "today": today_counts[kind],
                "yesterday": yesterday_counts[kind],
                "growthRate": rate,
                "trend": _trend(rate),
            }

        answers_per_question = (
            round(total_answers / total_questions, 2) if total_questions else 0
        )
        acceptance_rate = _percent(accepted, total_answers)
        verification_rate = _percent(verified_users, total_users)

        return {
            "totals": {
                "users": total_users,
                "questions": total_questions,
                "answers": total_answers,
                "comments": total_comments,
                "reports": total_reports,
            },
            "userStats": {
                "total": total_users,
                "verified": verified_users,
                "unverified": total_users - verified_users,
                "admins": admin_users,
                "regular": total_users - admin_users,
                "verificationRate": verification_rate,
            },
            "contentStats": {
                "questions": {
                    "total": total_questions,
                    "answered": answered,
                    "unanswered": total_questions - answered,
                    "answerRate": _percent(answered, total_questions),
                },
                "answers": {
                    "total": total_answers,
                    "accepted": accepted,
                    "unaccepted": total_answers - accepted,
                    "acceptanceRate": acceptance_rate,
                    "averagePerQuestion": answers_per_question,
                },
                "comments": total_comments,
            },
            "reports": {
                "total": total_reports,
                "pending": pending_reports,
                "resolved": resolved_reports,
                "resolutionRate": _percent(resolved_reports, total_reports),
            },
            "activity": {
                "today": today_counts,
                "yesterday": yesterday_counts,
                "thisWeek": week_counts,
                "thisMonth": month_counts,
            },
            "growth": growth,
            "topPerformers": {
                "usersByReputation": [
                    schemas.AdminUserSummary.model_validate(u)
                    for u in users.get_leaderboard(10)
                ],
                "questionsByVotes": [
                    schemas.QuestionOut.model_validate(q)
                    for q in questions.top_by_votes(5)
                ],
                "answersByVotes": [
                    schemas.AnswerWithQuestion.model_validate(a)
                    for a in answers.top_by_votes(5)
                ],
                "mostActiveUsers": [
                    {
                        "id": user.id,
                        "username": user.username,
                        "reputation": user.reputation,
                        "isAdmin": user.is_admin,
                        "questionsCount": question_count,
                        "answersCount": answer_count,
                        "totalActivity": question_count + answer_count,
                    }
                    for user, question_count, answer_count in users.get_most_active(10)
                ],
            },
            "insights": {
                "popularTags": [
                    {"tag": tag, "count": count}
                    for tag, count in questions.popular_tags(10)
                ],
                "engagementMetrics": {
                    "averageAnswersPerQuestion": answers_per_question,
                    "answerAcceptanceRate": acceptance_rate,
                    "userVerificationRate": verification_rate,
                },
            },
            "recentActivity": {
                "users": [
                    schemas.AdminUserSummary.model_validate(u)
                    for u in users.get_recent(5)
                ],
                "questions": [
                    schemas.QuestionOut.model_validate(q) for q in questions.recent(5)
                ],
                "answers": [
                    schemas.AnswerWithQuestion.model_validate(a)
                    for a in answers.recent(5)
                ],
            },
            "systemHealth": {
                "totalContentItems": total_questions + total_answers + total_comments,
                "contentEngagement": answers_per_question,
                "userEngagement": verification_rate,
                "moderationLoad": pending_reports,
                "platformActivity": today_counts["users"]
                + today_counts["questions"]
                + today_counts["answers"],
                "healthScore": health_score(
                    verification_rate,
                    acceptance_rate,
                    answers_per_question,
                    pending_reports,
                ),
            },
            "metadata": {
                "generatedAt": now,
                "dataRange": {
                    "today": today,
                    "weekAgo": week_ago,
                    "monthAgo": month_ago,
                },
            },
        }
