"""Friend router endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.responses import api_response
from repositories.database import get_db
from services.friend_service import FriendService

router = APIRouter(prefix="/friends", tags=["friends"])


def _profile(db: Session, user_id: int) -> dict:
    user, friends = FriendService.get_profile(db, user_id)
    return api_response(
        {
            "user": schemas.UserPublic.model_validate(user),
            "friends": [schemas.UserBrief.model_validate(f) for f in friends],
        }
    )


@router.post("/add")
def add_friend(
    payload: schemas.FriendRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    FriendService.add_friend(db, current_user, payload.friend_id)
    return api_response(message="Friend added successfully.")


@router.post("/remove")
def remove_friend(
    payload: schemas.FriendRequest,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    FriendService.remove_friend(db, current_user, payload.friend_id)
    return api_response(message="Friend removed successfully.")


@router.get("/profile")
def get_my_profile(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    return _profile(db, current_user.id)


@router.get("/profile/{user_id}")
def get_profile(
    user_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    return _profile(db, user_id)
