"""
Friend Service

Friendship is symmetric and immediate: one row per pair, no request step.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import BusinessRuleException, UserNotFoundException
from repositories.relation_repository import FriendshipRepository
from repositories.user_repository import UserRepository


class FriendService:
    """Service for symmetric friendships."""

    @staticmethod
    def add_friend(db: Session, user: db_models.User, friend_id: Optional[int]) -> None:
        """
        Raises:
            BusinessRuleException: On self-friending or an existing friendship
            UserNotFoundException: If the friend does not exist
        """
        if friend_id == user.id:
            raise BusinessRuleException("Cannot add yourself as a friend.")
        if friend_id is None or not UserRepository(db).exists(friend_id):
            raise UserNotFoundException("User not found.")

        repo = FriendshipRepository(db)
        if repo.get(user.id, friend_id):
            raise BusinessRuleException("Already friends.")

        repo.create(repo.build(user.id, friend_id))
        logger.info(f"Users {user.id} and {friend_id} are now friends")

    @staticmethod
    def remove_friend(
        db: Session, user: db_models.User, friend_id: Optional[int]
    ) -> None:
        """
        Raises:
            BusinessRuleException: If the two users are not friends
        """
        repo = FriendshipRepository(db)
        friendship = repo.get(user.id, friend_id) if friend_id is not None else None
        if not friendship:
            raise BusinessRuleException("Not friends.")

        repo.delete(friendship)
        repo.commit()
        logger.info(f"Users {user.id} and {friend_id} are no longer friends")

    @staticmethod
    def get_profile(
        db: Session, user_id: int
    ) -> tuple[db_models.User, List[db_models.User]]:
        """
        Returns:
            Tuple of (user, friends)

        Raises:
            UserNotFoundException: If the user does not exist
        """
        user = UserRepository(db).get_by_id(user_id)
        if not user:
            raise UserNotFoundException("User not found.")
        return user, FriendshipRepository(db).friends_of(user_id)
