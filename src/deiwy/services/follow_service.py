"""Follow and unfollow users."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from deiwy.core.errors import ForbiddenError, UserNotFoundError
from deiwy.models import Follow, User

logger = logging.getLogger(__name__)


def _require_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError()
    return user


def follow(db: Session, follower: User, followed_id: int) -> Follow:
    """Make ``follower`` follow ``followed_id``; following twice is a no-op."""
    if follower.user_id == followed_id:
        raise ForbiddenError("You cannot follow yourself.")
    _require_user(db, followed_id)

    existing = db.get(Follow, (follower.user_id, followed_id))
    if existing is not None:
        return existing

    relation = Follow(follower_id=follower.user_id, followed_id=followed_id)
    db.add(relation)
    db.commit()
    db.refresh(relation)
    logger.debug("User %s followed user %s", follower.user_id, followed_id)
    return relation


def unfollow(db: Session, follower: User, followed_id: int) -> bool:
    """Remove the relation; returns False if it did not exist."""
    existing = db.get(Follow, (follower.user_id, followed_id))
    if existing is None:
        return False
    db.delete(existing)
    db.commit()
    logger.debug("User %s unfollowed user %s", follower.user_id, followed_id)
    return True


def list_followers(db: Session, user_id: int) -> list[User]:
    """Users following ``user_id``, most recent first."""
    _require_user(db, user_id)
    return (
        db.query(User)
        .join(Follow, Follow.follower_id == User.user_id)
        .filter(Follow.followed_id == user_id)
        .order_by(Follow.created_at.desc())
        .all()
    )


def list_following(db: Session, user_id: int) -> list[User]:
    """Users that ``user_id`` follows, most recent first."""
    _require_user(db, user_id)
    return (
        db.query(User)
        .join(Follow, Follow.followed_id == User.user_id)
        .filter(Follow.follower_id == user_id)
        .order_by(Follow.created_at.desc())
        .all()
    )
