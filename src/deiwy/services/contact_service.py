"""User search and per-user contact lists."""
from __future__ import annotations

import logging

from sqlalchemy import and_, exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from deiwy.core.errors import ConstraintError, ForbiddenError, UserNotFoundError
from deiwy.core.settings import settings
from deiwy.models import Contact, User
from deiwy.schemas.user import UserSearchPage, UserSearchResult

logger = logging.getLogger(__name__)


def search_users(db: Session, current_user: User, query: str, page: int = 0) -> UserSearchPage:
    """Find users whose username starts with ``query``, excluding the caller.

    Each hit is flagged with ``is_contact`` when the caller already saved it.
    """
    batch = settings.users_search_batch_size
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    criteria = and_(
        User.username.ilike(f"{escaped}%", escape="\\"),
        User.user_id != current_user.user_id,
    )
    is_contact = exists().where(
        Contact.user_id == current_user.user_id,
        Contact.username == User.username,
    )

    count = db.scalar(select(func.count()).select_from(User).where(criteria)) or 0
    rows = db.execute(
        select(User, is_contact.label("is_contact"))
        .where(criteria)
        .order_by(User.username)
        .offset(page * batch)
        .limit(batch)
    ).all()

    items = [
        UserSearchResult(
            user_id=user.user_id,
            username=user.username,
            userkey=user.userkey,
            image=user.image,
            email=user.email,
            is_contact=bool(flag),
        )
        for user, flag in rows
    ]
    return UserSearchPage(count=count, items=items)


def list_contacts(db: Session, current_user: User) -> list[Contact]:
    """Return the caller's contacts ordered by username."""
    return (
        db.query(Contact)
        .filter(Contact.user_id == current_user.user_id)
        .order_by(Contact.username)
        .all()
    )


def add_contact(db: Session, current_user: User, username: str) -> Contact:
    """Save ``username`` as a contact of the caller."""
    target = db.query(User).filter(User.username == username).first()
    if target is None:
        raise UserNotFoundError()
    if target.user_id == current_user.user_id:
        raise ForbiddenError("You cannot add yourself as a contact.")

    contact = Contact(
        username=target.username,
        email=target.email,
        image=target.image,
        user_id=current_user.user_id,
    )
    db.add(contact)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConstraintError("This user is already one of your contacts.") from exc
    db.refresh(contact)
    logger.debug("User %s added contact %s", current_user.user_id, username)
    return contact


def remove_contact(db: Session, current_user: User, username: str) -> bool:
    """Remove a saved contact; returns False if it did not exist."""
    contact = (
        db.query(Contact)
        .filter(Contact.user_id == current_user.user_id, Contact.username == username)
        .first()
    )
    if contact is None:
        return False
    db.delete(contact)
    db.commit()
    return True
