import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session
from core.config import Settings
from core.errors import DuplicateEmail, InvalidCredentials, InvalidInput, Unauthenticated
from models.user import User
from models.user_session import UserSession
from services import session_store, user_store
from utils.security import dummy_verify, get_password_hash, verify_password


@dataclass(frozen=True)
class AuthContext:
    """Result of authentication, passed explicitly to everything downstream."""

    user: User
    session: UserSession


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _ttl(settings: Settings) -> timedelta:
    return timedelta(hours=settings.SESSION_TTL_HOURS)


def register(db: Session, settings: Settings, fullname: Optional[str], email: Optional[str],
             password: Optional[str]) -> AuthContext:
    """Create a user and log them in immediately."""
    if _blank(fullname) or _blank(email) or _blank(password):
        raise InvalidInput()

    if user_store.find_by_email(db, email):
        raise DuplicateEmail()

    user = user_store.create(db, fullname.strip(), email, get_password_hash(password))
    session = session_store.create(db, user.id, _ttl(settings))
    logging.info("User registered and logged in: %s", user.id)
    return AuthContext(user=user, session=session)


def login(db: Session, settings: Settings, email: Optional[str], password: Optional[str]) -> AuthContext:
    """Verify credentials and open a new session.

    Unknown email and wrong password raise the same error after the same amount of work.
    """
    if _blank(email) or _blank(password):
        raise InvalidCredentials()

    user = user_store.find_by_email(db, email)
    if user is None:
        dummy_verify()
        raise InvalidCredentials()
    if not verify_password(password, getattr(user, "hashed_password", "")):
        raise InvalidCredentials()

    session = session_store.create(db, user.id, _ttl(settings))
    logging.info("Logged in user: %s", user.id)
    return AuthContext(user=user, session=session)


def authenticate(db: Session, settings: Settings, token: Optional[str],
                 now: Optional[datetime] = None) -> AuthContext:
    """Resolve a session token to its user, refreshing the idle timer."""
    if not token:
        raise Unauthenticated()

    now = now or datetime.utcnow()
    session = session_store.get(db, token)
    if session is None:
        raise Unauthenticated()

    if session.is_expired(now):
        session_store.destroy(db, token)
        raise Unauthenticated()

    idle = settings.SESSION_IDLE_TIMEOUT_MINUTES
    if idle is not None and now - session.last_touched_at > timedelta(minutes=idle):
        logging.info("Session idle for more than %s minutes", idle)
        session_store.destroy(db, token)
        raise Unauthenticated()

    user = user_store.get_by_id(db, session.user_id)
    if user is None:
        logging.warning("Session refers to a missing user; destroying it")
        session_store.destroy(db, token)
        raise Unauthenticated()

    touch_after = timedelta(seconds=settings.SESSION_TOUCH_AFTER_SECONDS)
    if idle is not None:
        # touch often enough that an active session never looks idle
        touch_after = min(touch_after, timedelta(minutes=idle) / 2)
    session_store.touch(db, session, now, touch_after)
    return AuthContext(user=user, session=session)


def logout(db: Session, token: Optional[str]) -> None:
    if token:
        session_store.destroy(db, token)
