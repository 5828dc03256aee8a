"""
Repositories for user-to-user relations (follows and friendships).

Each relation is a single row. Follows are directed; a friendship is stored
once per unordered pair with the smaller user ID first, so both directions
resolve through the same row.
"""

from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

import repositories.db_models as db_models

from .base import BaseRepository


class FollowRepository(BaseRepository[db_models.Follow]):
    """Repository for directed follow edges."""

    def __init__(self, db: Session):
        super().__init__(db_models.Follow, db)

    def get(self, follower_id: int, followed_id: int) -> Optional[db_models.Follow]:
        return (
            self.db.query(db_models.Follow)
            .filter(
                db_models.Follow.follower_id == follower_id,
                db_models.Follow.followed_id == followed_id,
            )
            .first()
        )

    def is_following(self, follower_id: int, followed_id: int) -> bool:
        return self.get(follower_id, followed_id) is not None

    def following_of(self, user_id: int) -> List[db_models.User]:
        """Users that ``user_id`` follows."""
        return (
            self.db.query(db_models.User)
            .join(db_models.Follow, db_models.Follow.followed_id == db_models.User.id)
            .filter(db_models.Follow.follower_id == user_id)
            .order_by(db_models.Follow.created_at.desc())
            .all()
        )

    def followers_of(self, user_id: int) -> List[db_models.User]:
        """Users following ``user_id``."""
        return (
            self.db.query(db_models.User)
            .join(db_models.Follow, db_models.Follow.follower_id == db_models.User.id)
            .filter(db_models.Follow.followed_id == user_id)
            .order_by(db_models.Follow.created_at.desc())
            .all()
        )

    def following_ids(self, user_id: int) -> List[int]:
        return [
            row[0]
            for row in self.db.query(db_models.Follow.followed_id)
            .filter(db_models.Follow.follower_id == user_id)
            .all()
        ]

    def count_following(self, user_id: int) -> int:
        return (
            self.db.query(func.count(db_models.Follow.id))
            .filter(db_models.Follow.follower_id == user_id)
            .scalar()
            or 0
        )

    def count_followers(self, user_id: int) -> int:
        return (
            self.db.query(func.count(db_models.Follow.id))
            .filter(db_models.Follow.followed_id == user_id)
            .scalar()
            or 0
        )


class FriendshipRepository(BaseRepository[db_models.Friendship]):
    """Repository for symmetric friendships."""

    def __init__(self, db: Session):
        super().__init__(db_models.Friendship, db)

    @staticmethod
    def ordered_pair(user_a: int, user_b: int) -> tuple[int, int]:
        return (user_a, user_b) if user_a < user_b else (user_b, user_a)

    def get(self, user_a: int, user_b: int) -> Optional[db_models.Friendship]:
        low, high = self.ordered_pair(user_a, user_b)
        return (
            self.db.query(db_models.Friendship)
            .filter(
                db_models.Friendship.user_id == low,
                db_models.Friendship.friend_id == high,
            )
            .first()
        )

    def build(self, user_a: int, user_b: int) -> db_models.Friendship:
        low, high = self.ordered_pair(user_a, user_b)
        return db_models.Friendship(user_id=low, friend_id=high)

    def friends_of(self, user_id: int) -> List[db_models.User]:
        """Every user sharing a friendship row with ``user_id``."""
        rows = (
            self.db.query(db_models.Friendship)
            .filter(
                or_(
                    db_models.Friendship.user_id == user_id,
                    db_models.Friendship.friend_id == user_id,
                )
            )
            .order_by(db_models.Friendship.created_at.asc())
            .all()
        )
        friend_ids = [
            row.friend_id if row.user_id == user_id else row.user_id for row in rows
        ]
        if not friend_ids:
            return []
        users = {
            user.id: user
            for user in self.db.query(db_models.User)
            .filter(db_models.User.id.in_(friend_ids))
            .all()
        }
        return [users[fid] for fid in friend_ids if fid in users]
