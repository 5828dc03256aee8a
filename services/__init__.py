"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .admin_service import AdminService
from .ai_service import AIService
from .answer_service import AnswerService
from .auth_service import AuthService
from .bookmark_service import BookmarkService
from .comment_service import CommentService
from .content_service import ContentService
from .follow_service import FollowService
from .friend_service import FriendService
from .notification_service import NotificationService
from .password_reset_service import PasswordResetService
from .question_service import QuestionService
from .upload_service import UploadService
from .user_service import UserService
from .vote_service import VoteService

__all__ = [
    "AdminService",
    "AIService",
    "AnswerService",
    "AuthService",
    "BookmarkService",
    "CommentService",
    "ContentService",
    "FollowService",
    "FriendService",
    "NotificationService",
    "PasswordResetService",
    "QuestionService",
    "UploadService",
    "UserService",
    "VoteService",
]
