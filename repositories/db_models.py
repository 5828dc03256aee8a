"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

List-valued relations (tags, bookmarks, follows, friends) are join tables.
Comments and reports point at their parent through a (content_type,
content_id) pair resolved by services.content_service.
"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repositories.database import Base


class ContentType(str, enum.Enum):
    """Kinds of content that comments and reports can point at."""

    QUESTION = "question"
    ANSWER = "answer"
    COMMENT = "comment"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


class NotificationType(str, enum.Enum):
    FOLLOW = "follow"
    QUESTION_UPVOTE = "question_upvote"
    QUESTION_DOWNVOTE = "question_downvote"
    ANSWER_UPVOTE = "answer_upvote"
    ANSWER_DOWNVOTE = "answer_downvote"
    ANSWER_ACCEPTED = "answer_accepted"
    NEW_ANSWER = "new_answer"
    NEW_COMMENT = "new_comment"
    MENTION = "mention"
    BADGE_EARNED = "badge_earned"
    REPUTATION_MILESTONE = "reputation_milestone"


class Theme(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    is_banned: Mapped[bool] = mapped_column(Boolean, default=False)
    is_suspended: Mapped[bool] = mapped_column(Boolean, default=False)
    reputation: Mapped[int] = mapped_column(Integer, default=0, index=True)
    badges: Mapped[List[str]] = mapped_column(JSON, default=list)

    # Profile
    full_name: Mapped[str] = mapped_column(String(100), default="")
    bio: Mapped[str] = mapped_column(Text, default="")
    location: Mapped[str] = mapped_column(String(100), default="")
    website: Mapped[str] = mapped_column(String(255), default="")
    avatar: Mapped[str] = mapped_column(String(500), default="")
    profile_tags: Mapped[List[str]] = mapped_column(JSON, default=list)

    # Settings
    theme: Mapped[Theme] = mapped_column(Enum(Theme), default=Theme.AUTO)
    language: Mapped[str] = mapped_column(String(10), default="en")
    email_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    push_notifications: Mapped[bool] = mapped_column(Boolean, default=True)

    # Email verification
    verification_token: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, index=True
    )
    verification_token_expires: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    email_verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Password reset (sha256 hex digest of the emailed token)
    reset_password_token: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, index=True
    )
    reset_password_expires: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )

    questions: Mapped[List["Question"]] = relationship(
        "Question", back_populates="author"
    )
    answers: Mapped[List["Answer"]] = relationship("Answer", back_populates="author")

    @property
    def profile(self) -> dict:
        return {
            "fullName": self.full_name or "",
            "bio": self.bio or "",
            "location": self.location or "",
            "website": self.website or "",
            "avatar": self.avatar or "",
            "tags": list(self.profile_tags or []),
        }

    @property
    def settings(self) -> dict:
        theme = self.theme.value if isinstance(self.theme, Theme) else self.theme
        return {
            "theme": theme or Theme.AUTO.value,
            "language": self.language or "en",
            "emailNotifications": bool(self.email_notifications),
            "pushNotifications": bool(self.push_notifications),
        }


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    title: Mapped[str] = mapped_column(String(300))
    body: Mapped[str] = mapped_column(Text)
    votes: Mapped[int] = mapped_column(Integer, default=0, index=True)
    answer_count: Mapped[int] = mapped_column(Integer, default=0, index=True)
    views: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )

    author: Mapped["User"] = relationship("User", back_populates="questions")
    tag_links: Mapped[List["QuestionTag"]] = relationship(
        "QuestionTag",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionTag.id",
    )
    answers: Mapped[List["Answer"]] = relationship(
        "Answer", back_populates="question", passive_deletes=True
    )

    @property
    def tags(self) -> list[str]:
        return [link.name for link in self.tag_links]


class QuestionTag(Base):
    __tablename__ = "question_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(50), index=True)

    question: Mapped["Question"] = relationship("Question", back_populates="tag_links")

    __table_args__ = (
        UniqueConstraint("question_id", "name", name="uq_question_tag"),
    )


class Answer(Base):
    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    body: Mapped[str] = mapped_column(Text)
    votes: Mapped[int] = mapped_column(Integer, default=0)
    is_accepted: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )

    author: Mapped["User"] = relationship("User", back_populates="answers")
    question: Mapped["Question"] = relationship("Question", back_populates="answers")

    __table_args__ = (
        Index("ix_answers_question_accepted", "question_id", "is_accepted"),
    )


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    content_type: Mapped[ContentType] = mapped_column(Enum(ContentType))
    content_id: Mapped[int] = mapped_column(Integer)
    body: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )

    author: Mapped["User"] = relationship("User")

    __table_args__ = (
        Index("ix_comments_content", "content_type", "content_id"),
    )


class Report(Base):
    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    reporter_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    content_type: Mapped[ContentType] = mapped_column(Enum(ContentType))
    content_id: Mapped[int] = mapped_column(Integer)
    reason: Mapped[str] = mapped_column(Text)
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus), default=ReportStatus.PENDING, index=True
    )
    resolved_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)

    reporter: Mapped["User"] = relationship("User", foreign_keys=[reporter_id])

    __table_args__ = (
        UniqueConstraint(
            "reporter_id", "content_id", "content_type", name="uq_report_per_reporter"
        ),
        Index("ix_reports_content", "content_type", "content_id"),
    )


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    recipient_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    sender_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    type: Mapped[NotificationType] = mapped_column(Enum(NotificationType))
    title: Mapped[str] = mapped_column(String(200))
    message: Mapped[str] = mapped_column(Text)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    read_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    data: Mapped[dict] = mapped_column(JSON, default=dict)
    question_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    answer_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    comment_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)

    sender: Mapped[Optional["User"]] = relationship("User", foreign_keys=[sender_id])


class Bookmark(Base):
    __tablename__ = "bookmarks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)

    question: Mapped["Question"] = relationship("Question")

    __table_args__ = (
        UniqueConstraint("user_id", "question_id", name="uq_bookmark_user_question"),
    )


class Follow(Base):
    """Directed follow edge; both directions are indexed for lookups."""

    __tablename__ = "follows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    follower_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    followed_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)

    __table_args__ = (
        UniqueConstraint("follower_id", "followed_id", name="uq_follow_pair"),
        CheckConstraint("follower_id <> followed_id", name="ck_follow_not_self"),
    )


class Friendship(Base):
    """Undirected friendship stored once per pair with user_id < friend_id."""

    __tablename__ = "friendships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    friend_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)

    __table_args__ = (
        UniqueConstraint("user_id", "friend_id", name="uq_friendship_pair"),
        CheckConstraint("user_id < friend_id", name="ck_friendship_ordered"),
    )
