"""
Repository layer for database operations.

Repositories encapsulate all database queries and provide a clean interface
for the service layer.
"""

from .answer_repository import AnswerRepository
from .base import BaseRepository
from .bookmark_repository import BookmarkRepository
from .comment_repository import CommentRepository
from .notification_repository import NotificationRepository
from .question_repository import QuestionRepository
from .relation_repository import FollowRepository, FriendshipRepository
from .report_repository import ReportRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "QuestionRepository",
    "AnswerRepository",
    "CommentRepository",
    "ReportRepository",
    "NotificationRepository",
    "BookmarkRepository",
    "FollowRepository",
    "FriendshipRepository",
]
