"""
User Service

Profiles, settings, leaderboard, search and per-user statistics.
"""

from typing import Any, List, Optional
from urllib.parse import urlparse

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_fields
from helpers.time_utils import days_ago
from models.exceptions import UserNotFoundException, ValidationException
from repositories.answer_repository import AnswerRepository
from repositories.bookmark_repository import BookmarkRepository
from repositories.question_repository import QuestionRepository
from repositories.user_repository import UserRepository
from services.admin_service import round_half_up
from services.answer_service import ACCEPT_REPUTATION_BONUS
from services.vote_service import RULES

MAX_PROFILE_TAGS = 10
RECENT_WINDOW_DAYS = 30
TIMEFRAMES = {"week": 7, "month": 30}
QUESTION_UPVOTE_REPUTATION = RULES[db_models.ContentType.QUESTION].up_reputation
ANSWER_UPVOTE_REPUTATION = RULES[db_models.ContentType.ANSWER].up_reputation


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class UserService:
    """Service for user profiles and statistics."""

    @staticmethod
    def get_user(db: Session, user_id: int) -> db_models.User:
        user = UserRepository(db).get_by_id(user_id)
        if not user:
            raise UserNotFoundException()
        return user

    @staticmethod
    def get_stats(db: Session, user: db_models.User) -> dict:
        """Counts shown on the profile card."""
        answer_repo = AnswerRepository(db)
        return {
            "questionsAsked": QuestionRepository(db).count_by_user(user.id),
            "answersGiven": answer_repo.count_by_user(user.id),
            "acceptedAnswers": answer_repo.count_by_user(user.id, accepted_only=True),
            "reputation": user.reputation,
            "badges": list(user.badges or []),
            "joinedDate": user.created_at,
        }

    @staticmethod
    def get_me(
        db: Session, user: db_models.User
    ) -> tuple[dict, List[db_models.Question]]:
        """
        Returns:
            Tuple of (stats, bookmarked questions)
        """
        bookmarks, _ = BookmarkRepository(db).list_questions(user.id, 1, 100)
        return UserService.get_stats(db, user), bookmarks

    @staticmethod
    def get_public_profile(db: Session, user_id: int) -> dict:
        """
        Public view of a user: profile without email, stats and the five
        latest questions and answers.

        Raises:
            UserNotFoundException: If the user does not exist
        """
        user = UserService.get_user(db, user_id)
        questions = QuestionRepository(db).get_by_user(user.id, limit=5)
        answers = AnswerRepository(db).get_by_user(user.id, limit=5)
        return {
            "user": schemas.UserPublic.model_validate(user),
            "stats": UserService.get_stats(db, user),
            "recentActivity": {
                "questions": [schemas.QuestionSummary.model_validate(q) for q in questions],
                "answers": [schemas.AnswerWithQuestion.model_validate(a) for a in answers],
            },
        }

    @staticmethod
    def update_profile(
        db: Session, user: db_models.User, update: schemas.UserProfileUpdate
    ) -> db_models.User:
        """
        Update profile fields that were sent.

        Raises:
            ValidationException: On a non-http(s) website or bad tags
        """
        if update.website and not _is_http_url(update.website.strip()):
            raise ValidationException("Please provide a valid website URL")
        if update.tags is not None and (
            not isinstance(update.tags, list) or len(update.tags) > MAX_PROFILE_TAGS
        ):
            raise ValidationException("Tags must be an array with maximum 10 items")

        text_fields = sanitize_fields(
            full_name=update.full_name, bio=update.bio, location=update.location
        )
        for field, value in text_fields.items():
            setattr(user, field, value)
        if update.website is not None:
            user.website = update.website.strip()
        if update.avatar is not None:
            user.avatar = update.avatar.strip()
        if update.tags is not None:
            user.profile_tags = [str(tag).strip() for tag in update.tags if str(tag).strip()]

        user = UserRepository(db).update(user)
        logger.info(f"User {user.id} updated their profile")
        return user

    @staticmethod
    def update_settings(
        db: Session, user: db_models.User, update: schemas.SettingsUpdate
    ) -> db_models.User:
        """
        Raises:
            ValidationException: On an unknown theme
        """
        if update.theme is not None:
            try:
                user.theme = db_models.Theme(update.theme)
            except ValueError:
                raise ValidationException(
                    "Invalid theme value. Must be light, dark, or auto"
                )
        if update.language is not None:
            user.language = update.language
        if update.email_notifications is not None:
            user.email_notifications = update.email_notifications
        if update.push_notifications is not None:
            user.push_notifications = update.push_notifications

        user = UserRepository(db).update(user)
        logger.info(f"User {user.id} updated their settings")
        return user

    @staticmethod
    def leaderboard(
        db: Session, limit: int = 10, timeframe: str = "all"
    ) -> List[db_models.User]:
        """Top users by reputation, optionally only those who joined recently."""
        days = TIMEFRAMES.get(timeframe)
        joined_since = days_ago(days) if days else None
        return UserRepository(db).get_leaderboard(limit, joined_since=joined_since)

    @staticmethod
    def search(
        db: Session, q: Optional[str], page: int, limit: int
    ) -> tuple[List[db_models.User], int]:
        """
        Raises:
            ValidationException: If the query is empty
        """
        term = (q or "").strip()
        if not term:
            raise ValidationException("Please provide search query")
        return UserRepository(db).search_by_username(term, page, limit)

    @staticmethod
    def reputation_breakdown(db: Session, user_id: int) -> dict:
        """Split a user's reputation by where it was earned."""
        user = UserService.get_user(db, user_id)
        _, question_votes, _, _ = QuestionRepository(db).vote_stats_for_user(user.id)
        _, answer_votes, accepted, _ = AnswerRepository(db).vote_stats_for_user(user.id)
        return {
            "username": user.username,
            "reputationBreakdown": {
                "totalReputation": user.reputation,
                "fromQuestions": question_votes * QUESTION_UPVOTE_REPUTATION,
                "fromAnswers": answer_votes * ANSWER_UPVOTE_REPUTATION,
                "fromAcceptedAnswers": accepted * ACCEPT_REPUTATION_BONUS,
                "badges": list(user.badges or []),
            },
        }

    @staticmethod
    def summary(db: Session, user_id: int) -> dict:
        """User card, per-kind statistics and top contributions."""
        user = UserService.get_user(db, user_id)
        question_repo = QuestionRepository(db)
        answer_repo = AnswerRepository(db)
        since = days_ago(RECENT_WINDOW_DAYS)

        q_count, q_votes, q_views, q_avg = question_repo.vote_stats_for_user(user.id)
        a_count, a_votes, a_accepted, a_avg = answer_repo.vote_stats_for_user(user.id)
        acceptance_rate = round_half_up(a_accepted / a_count * 100) if a_count else 0

        top_questions = question_repo.get_by_user(user.id, limit=3, order_by_votes=True)
        top_answers = answer_repo.get_by_user(user.id, limit=3, order_by_votes=True)

        return {
            "user": {
                "username": user.username,
                "reputation": user.reputation,
                "badges": list(user.badges or []),
                "joinedDate": user.created_at,
            },
            "statistics": {
                "questions": {
                    "total": q_count,
                    "totalVotes": q_votes,
                    "totalViews": q_views,
                    "averageVotes": round(q_avg, 2),
                    "recentCount": question_repo.count_by_user(user.id, since=since),
                },
                "answers": {
                    "total": a_count,
                    "totalVotes": a_votes,
                    "acceptedCount": a_accepted,
                    "acceptanceRate": acceptance_rate,
                    "averageVotes": round(a_avg, 2),
                    "recentCount": answer_repo.count_by_user(user.id, since=since),
                },
            },
            "topContributions": {
                "questions": [
                    schemas.QuestionSummary.model_validate(q) for q in top_questions
                ],
                "answers": [
                    schemas.AnswerWithQuestion.model_validate(a) for a in top_answers
                ],
            },
        }

    @staticmethod
    def activity(db: Session, user_id: int, page: int, limit: int) -> List[dict]:
        """
        Questions and answers of a user merged into one feed, newest first.
        """
        UserService.get_user(db, user_id)
        window = page * limit
        items: List[dict[str, Any]] = [
            {
                "type": "question",
                "data": schemas.QuestionSummary.model_validate(q),
                "timestamp": q.created_at,
            }
            for q in QuestionRepository(db).get_by_user(user_id, limit=window)
        ]
        items += [
            {
                "type": "answer",
                "data": schemas.AnswerWithQuestion.model_validate(a),
                "timestamp": a.created_at,
            }
            for a in AnswerRepository(db).get_by_user(user_id, limit=window)
        ]
        items.sort(key=lambda item: item["timestamp"], reverse=True)
        start = (page - 1) * limit
        return items[start : start + limit]

