"""Follow relations between users."""

from __future__ import annotations

from fastapi import APIRouter

from deiwy.api.v1.dependencies import SessionDep, VerifiedUserDep
from deiwy.schemas.user import FollowToggleResponse, UserSummary
from deiwy.services import follow_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/{user_id}/follow", response_model=FollowToggleResponse)
async def follow_user(user_id: int, current_user: VerifiedUserDep, db: SessionDep) -> FollowToggleResponse:
    """Follow another user. Following someone twice has no further effect."""
    follow_service.follow(db, current_user, user_id)
    return FollowToggleResponse(is_following=True)


@router.delete("/{user_id}/follow", response_model=FollowToggleResponse)
async def unfollow_user(user_id: int, current_user: VerifiedUserDep, db: SessionDep) -> FollowToggleResponse:
    """Stop following a user. Unfollowing someone you do not follow has no effect."""
    follow_service.unfollow(db, current_user, user_id)
    return FollowToggleResponse(is_following=False)


@router.get("/{user_id}/followers", response_model=list[UserSummary])
async def list_followers(user_id: int, current_user: VerifiedUserDep, db: SessionDep) -> list[UserSummary]:
    """Users following ``user_id``, most recent first."""
    return [UserSummary.model_validate(user) for user in follow_service.list_followers(db, user_id)]


@router.get("/{user_id}/following", response_model=list[UserSummary])
async def list_following(user_id: int, current_user: VerifiedUserDep, db: SessionDep) -> list[UserSummary]:
    """Users that ``user_id`` follows, most recent first."""
    return [UserSummary.model_validate(user) for user in follow_service.list_following(db, user_id)]
