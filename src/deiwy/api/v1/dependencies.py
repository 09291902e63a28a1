"""Shared API dependencies for sessions, authentication and services."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from deiwy.core.errors import AuthenticationError, EmailError
from deiwy.core.security import read_session_id
from deiwy.core.settings import settings
from deiwy.db.session import get_db
from deiwy.models import User
from deiwy.services.mailer import Mailer, get_mailer
from deiwy.services.session_store import SessionState, SessionStore
from deiwy.services.verification import VerificationCodeStore, get_verification_store

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_session_store(db: SessionDep) -> SessionStore:
    return SessionStore(db)


SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]


def get_web_session(request: Request, store: SessionStoreDep) -> SessionState | None:
    """Load the session referenced by the signed session cookie, if any."""
    token = request.cookies.get(settings.session_cookie_name)
    return store.load(read_session_id(token))


WebSessionDep = Annotated[SessionState | None, Depends(get_web_session)]


def _session_user(web_session: SessionState | None, db: Session, redirect: str) -> User:
    if web_session is None or web_session.user_id is None:
        raise AuthenticationError(redirect=redirect)
    user = db.get(User, web_session.user_id)
    if user is None:
        raise AuthenticationError(redirect=redirect)
    return user


def get_current_user(web_session: WebSessionDep, db: SessionDep) -> User:
    """Return the signed-in user.

    Raises:
        AuthenticationError: If there is no live session or its user is gone.
    """
    return _session_user(web_session, db, "/")


def get_page_user(web_session: WebSessionDep, db: SessionDep) -> User:
    """Like :func:`get_current_user` but sends anonymous visitors to the sign-in page."""
    return _session_user(web_session, db, "/sign-in")


CurrentUserDep = Annotated[User, Depends(get_current_user)]
PageUserDep = Annotated[User, Depends(get_page_user)]


def get_verified_user(user: CurrentUserDep) -> User:
    """Return the signed-in user once their email address is verified."""
    if not user.is_verified:
        raise EmailError("NotVerified", redirect="/email-verification")
    return user


VerifiedUserDep = Annotated[User, Depends(get_verified_user)]


def get_verification_store_dep() -> VerificationCodeStore:
    return get_verification_store()


def get_mailer_dep() -> Mailer:
    return get_mailer()


VerificationStoreDep = Annotated[VerificationCodeStore, Depends(get_verification_store_dep)]
MailerDep = Annotated[Mailer, Depends(get_mailer_dep)]
