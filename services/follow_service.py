"""
Follow Service

Directed follow edges between users, stored once per (follower, followed).
"""

from typing import List

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import BusinessRuleException, UserNotFoundException
from repositories.relation_repository import FollowRepository
from repositories.user_repository import UserRepository
from services.notification_service import NotificationService

SUGGESTION_LIMIT = 10


class FollowService:
    """Service for following users."""

    @staticmethod
    def follow(db: Session, follower: db_models.User, user_id: int) -> None:
        """
        Raises:
            BusinessRuleException: On self-follow or a repeated follow
            UserNotFoundException: If the target does not exist
        """
        if follower.id == user_id:
            raise BusinessRuleException("Cannot follow yourself")
        if not UserRepository(db).exists(user_id):
            raise UserNotFoundException()

        repo = FollowRepository(db)
        if repo.is_following(follower.id, user_id):
            raise BusinessRuleException("Already following this user")

        repo.add(db_models.Follow(follower_id=follower.id, followed_id=user_id))
        NotificationService.notify(
            db,
            recipient_id=user_id,
            sender=follower,
            notification_type=db_models.NotificationType.FOLLOW,
            message=f"{follower.username} started following you",
            data={"url": f"/users/{follower.id}"},
        )
        repo.commit()
        logger.info(f"User {follower.id} followed user {user_id}")

    @staticmethod
    def unfollow(db: Session, follower: db_models.User, user_id: int) -> None:
        """
        Raises:
            UserNotFoundException: If the target does not exist
            BusinessRuleException: If the user is not followed
        """
        if not UserRepository(db).exists(user_id):
            raise UserNotFoundException()

        repo = FollowRepository(db)
        follow = repo.get(follower.id, user_id)
        if not follow:
            raise BusinessRuleException("Not following this user")

        repo.delete(follow)
        repo.commit()
        logger.info(f"User {follower.id} unfollowed user {user_id}")

    @staticmethod
    def following(db: Session, user_id: int) -> List[db_models.User]:
        if not UserRepository(db).exists(user_id):
            raise UserNotFoundException()
        return FollowRepository(db).following_of(user_id)

    @staticmethod
    def followers(db: Session, user_id: int) -> List[db_models.User]:
        if not UserRepository(db).exists(user_id):
            raise UserNotFoundException()
        return FollowRepository(db).followers_of(user_id)

    @staticmethod
    def connection_status(db: Session, user: db_models.User, user_id: int) -> dict:
        if user.id == user_id:
            return {"isFollowing": False, "isSelf": True}
        return {
            "isFollowing": FollowRepository(db).is_following(user.id, user_id),
            "isSelf": False,
        }

    @staticmethod
    def suggestions(db: Session, user: db_models.User) -> List[db_models.User]:
        """Verified users the caller does not follow yet."""
        exclude = FollowRepository(db).following_ids(user.id) + [user.id]
        return UserRepository(db).get_suggestions(exclude, limit=SUGGESTION_LIMIT)
