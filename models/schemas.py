from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from repositories.db_models import (
    ContentType,
    NotificationType,
    ReportStatus,
)


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire (both accepted on input)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Request bodies. Required fields are Optional here so services can answer
# with the same 400 messages the API has always used.

TagsInput = Optional[Union[List[str], str]]


class RegisterRequest(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class EmailRequest(CamelModel):
    email: Optional[str] = None


class PasswordResetRequest(CamelModel):
    password: Optional[str] = None


class AuthProfileUpdate(CamelModel):
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None


class QuestionCreate(CamelModel):
    title: Optional[str] = None
    body: Optional[str] = None
    tags: TagsInput = None


class QuestionUpdate(CamelModel):
    title: Optional[str] = None
    body: Optional[str] = None
    tags: TagsInput = None


class VoteRequest(CamelModel):
    vote_type: Optional[str] = None


class BodyRequest(CamelModel):
    """Payload for answers and comments."""

    body: Optional[str] = None


class FriendRequest(CamelModel):
    friend_id: Optional[int] = None


class UserProfileUpdate(CamelModel):
    full_name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    avatar: Optional[str] = None
    tags: Optional[Any] = None


class SettingsUpdate(CamelModel):
    theme: Optional[str] = None
    language: Optional[str] = None
    email_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None


class ReportCreate(CamelModel):
    content_id: Optional[int] = None
    content_type: Optional[str] = None
    reason: Optional[str] = None


class ActionRequest(CamelModel):
    """Admin action payload (report resolution or user management)."""

    action: Optional[str] = None


class AIQuestionRequest(CamelModel):
    question_title: Optional[str] = None
    question_body: Optional[str] = None
    tags: Optional[List[str]] = None


class ChatbotRequest(CamelModel):
    message: Optional[str] = None
    context: Optional[str] = None


# User Schemas
class UserBrief(CamelModel):
    id: int
    username: str
    reputation: int = 0


class AuthUser(CamelModel):
    id: int
    username: str
    email: str
    is_verified: bool
    is_admin: bool
    reputation: int


class AuthUserWithProfile(AuthUser):
    profile: dict


class UserPublic(CamelModel):
    """Public profile: never includes the email address."""

    id: int
    username: str
    reputation: int
    badges: List[str] = []
    profile: dict
    is_verified: bool
    is_admin: bool
    created_at: datetime


class UserPrivate(UserPublic):
    email: str
    settings: dict
    is_banned: bool = False
    is_suspended: bool = False
    updated_at: Optional[datetime] = None


class LeaderboardEntry(CamelModel):
    id: int
    username: str
    reputation: int
    badges: List[str] = []
    created_at: datetime


class UserSearchResult(LeaderboardEntry):
    bio: str = ""


class AdminUserSummary(CamelModel):
    id: int
    username: str
    email: str
    reputation: int
    is_admin: bool
    is_verified: bool
    is_banned: bool = False
    is_suspended: bool = False
    created_at: datetime


class TokenData(BaseModel):
    user_id: int


# Question Schemas
class QuestionOut(CamelModel):
    id: int
    title: str
    body: str
    tags: List[str] = []
    votes: int
    answer_count: int
    views: int = 0
    user: UserBrief = Field(validation_alias=AliasChoices("author", "user"))
    created_at: datetime
    updated_at: Optional[datetime] = None


class QuestionRef(CamelModel):
    id: int
    title: str


class AnswerOut(CamelModel):
    id: int
    question_id: int
    body: str
    votes: int
    is_accepted: bool
    user: UserBrief = Field(validation_alias=AliasChoices("author", "user"))
    created_at: datetime
    updated_at: Optional[datetime] = None


class AnswerWithQuestion(CamelModel):
    id: int
    body: str
    votes: int
    is_accepted: bool
    question: QuestionRef
    created_at: datetime


class CommentOut(CamelModel):
    id: int
    body: str
    content_type: ContentType
    content_id: int
    user: UserBrief = Field(validation_alias=AliasChoices("author", "user"))
    created_at: datetime
    updated_at: Optional[datetime] = None


class QuestionDetail(QuestionOut):
    answers: List[AnswerOut] = []
    comments: List[CommentOut] = []


class QuestionSummary(CamelModel):
    id: int
    title: str
    votes: int
    views: int = 0
    created_at: datetime


# Moderation Schemas
class ReportOut(CamelModel):
    id: int
    reporter: UserBrief
    content_type: ContentType
    content_id: int
    reason: str
    status: ReportStatus
    resolved_at: Optional[datetime] = None
    created_at: datetime


# Notification Schemas
class NotificationOut(CamelModel):
    id: int
    type: NotificationType
    title: str
    message: str
    is_read: bool
    read_at: Optional[datetime] = None
    data: dict = {}
    sender: Optional[UserBrief] = None
    question_id: Optional[int] = None
    answer_id: Optional[int] = None
    comment_id: Optional[int] = None
    created_at: datetime


# Upload Schemas
class UploadedFile(CamelModel):
    filename: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str
    uploaded_at: datetime
