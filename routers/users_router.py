"""User router endpoints.

Static paths are declared before ``/{user_id}`` so they are matched first.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import LimitParam, PageParam, build_pagination, total_pages
from helpers.responses import api_response
from models.exceptions import ValidationException
from repositories.database import get_db
from services.follow_service import FollowService
from services.notification_service import NotificationService
from services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


def _resolve_user_id(value: str, current_user: db_models.User) -> int:
    """Accept ``me`` as an alias of the caller's id."""
    if value == "me":
        return current_user.id
    try:
        return int(value)
    except ValueError:
        raise ValidationException("Invalid user id")


# Public


@router.get("/leaderboard")
def get_leaderboard(
    limit: LimitParam = 10,
    timeframe: str = "all",
    db: Session = Depends(get_db),
) -> dict:
    """Top users by reputation; ``timeframe`` is all, month or week."""
    users = UserService.leaderboard(db, limit, timeframe)
    return api_response(
        {
            "leaderboard": [schemas.LeaderboardEntry.model_validate(u) for u in users],
            "timeframe": timeframe,
            "count": len(users),
        }
    )


@router.get("/search")
def search_users(
    q: Optional[str] = None,
    page: PageParam = 1,
    limit: LimitParam = 10,
    db: Session = Depends(get_db),
) -> dict:
    users, total = UserService.search(db, q, page, limit)
    return api_response(
        {
            "users": [schemas.UserSearchResult.model_validate(u) for u in users],
            "totalUsers": total,
            "currentPage": page,
            "totalPages": total_pages(total, limit),
        }
    )


# Own account


@router.get("/me")
def get_me(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    """Own profile with bookmarks and stats."""
    stats, bookmarks = UserService.get_me(db, current_user)
    return api_response(
        {
            "user": schemas.UserPrivate.model_validate(current_user),
            "bookmarks": [schemas.QuestionOut.model_validate(q) for q in bookmarks],
            "stats": stats,
        }
    )


@router.put("/profile")
def update_profile(
    payload: schemas.UserProfileUpdate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    user = UserService.update_profile(db, current_user, payload)
    return api_response(
        {"user": schemas.UserPrivate.model_validate(user)},
        "Profile updated successfully",
    )


@router.get("/settings")
async def get_settings(
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> dict:
    return api_response(
        {
            "settings": current_user.settings,
            "profile": {
                "username": current_user.username,
                "email": current_user.email,
                "fullName": current_user.full_name or "",
            },
        }
    )


@router.put("/settings")
def update_settings(
    payload: schemas.SettingsUpdate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    user = UserService.update_settings(db, current_user, payload)
    return api_response(
        {"settings": user.settings, "username": user.username},
        "Settings updated successfully",
    )


@router.get("/suggestions")
def get_suggestions(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    """Verified users worth following."""
    users = FollowService.suggestions(db, current_user)
    return api_response(
        {"suggestions": [schemas.UserSearchResult.model_validate(u) for u in users]}
    )


# Notifications


@router.get("/notifications")
def get_notifications(
    page: PageParam = 1,
    limit: LimitParam = 20,
    unread: bool = False,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    notifications, total, unread_count = NotificationService.list_for_user(
        db, current_user, page, limit, unread_only=unread
    )
    pagination = build_pagination(page, limit, total, "totalCount")
    pagination["unreadCount"] = unread_count
    return api_response(
        {
            "notifications": [
                schemas.NotificationOut.model_validate(n) for n in notifications
            ],
            "pagination": pagination,
        }
    )


@router.put("/notifications/read-all")
def mark_all_notifications_read(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    count = NotificationService.mark_all_read(db, current_user)
    return api_response(
        {"markedCount": count}, f"{count} notifications marked as read"
    )


@router.put("/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    notification = NotificationService.mark_read(db, current_user, notification_id)
    return api_response(
        {"notification": schemas.NotificationOut.model_validate(notification)},
        "Notification marked as read",
    )


# Per-user


@router.get("/{user_id}/reputation")
def get_reputation(user_id: int, db: Session = Depends(get_db)) -> dict:
    return api_response(UserService.reputation_breakdown(db, user_id))


@router.get("/{user_id}/summary")
def get_summary(user_id: int, db: Session = Depends(get_db)) -> dict:
    return api_response(UserService.summary(db, user_id))


@router.get("/{user_id}/activity")
def get_activity(
    user_id: int,
    page: PageParam = 1,
    limit: LimitParam = 20,
    db: Session = Depends(get_db),
) -> dict:
    """Questions and answers of a user, newest first."""
    activities = UserService.activity(db, user_id, page, limit)
    return api_response(
        {
            "activities": activities,
            "currentPage": page,
            "hasMore": len(activities) == limit,
        }
    )


@router.get("/{user_id}/following")
def get_following(
    user_id: str,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    users = FollowService.following(db, _resolve_user_id(user_id, current_user))
    return api_response(
        {
            "following": [schemas.UserBrief.model_validate(u) for u in users],
            "count": len(users),
        }
    )


@router.get("/{user_id}/followers")
def get_followers(
    user_id: str,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    users = FollowService.followers(db, _resolve_user_id(user_id, current_user))
    return api_response(
        {
            "followers": [schemas.UserBrief.model_validate(u) for u in users],
            "count": len(users),
        }
    )


@router.get("/{user_id}/connection-status")
def get_connection_status(
    user_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    return api_response(FollowService.connection_status(db, current_user, user_id))


@router.post("/{user_id}/follow")
def follow_user(
    user_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    FollowService.follow(db, current_user, user_id)
    return api_response(message="User followed successfully")


@router.delete("/{user_id}/follow")
def unfollow_user(
    user_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    FollowService.unfollow(db, current_user, user_id)
    return api_response(message="User unfollowed successfully")


@router.get("/{user_id}")
def get_user_profile(user_id: int, db: Session = Depends(get_db)) -> dict:
    """Public profile; the email address is never included."""
    return api_response(UserService.get_public_profile(db, user_id))
