"""Server-side session storage keyed by an opaque token, with TTL expiry."""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from core.errors import StorageError
from models.user_session import UserSession


def new_token() -> str:
    return secrets.token_urlsafe(32)


def create(db: Session, user_id: str, ttl: timedelta, now: Optional[datetime] = None) -> UserSession:
    now = now or datetime.utcnow()
    session = UserSession(
        token=new_token(),
        user_id=user_id,
        created_at=now,
        expires_at=now + ttl,
        last_touched_at=now,
    )
    db.add(session)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Failed to store session: {str(e)}")
        raise StorageError(str(e))
    db.refresh(session)
    return session


def get(db: Session, token: str) -> Optional[UserSession]:
    return db.query(UserSession).filter(UserSession.token == token).first()


def touch(db: Session, session: UserSession, now: datetime, touch_after: timedelta) -> bool:
    """Refresh last_touched_at, at most once per ``touch_after``. Lost updates are tolerated."""
    if now - session.last_touched_at < touch_after:
        return False
    setattr(session, 'last_touched_at', now)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logging.warning("Session touch failed; continuing", exc_info=True)
        return False
    return True


def destroy(db: Session, token: str) -> None:
    """Delete a session. Missing sessions are not an error."""
    try:
        db.query(UserSession).filter(UserSession.token == token).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Failed to destroy session: {str(e)}")
        raise StorageError(str(e))


def purge_expired(db: Session, now: Optional[datetime] = None) -> int:
    now = now or datetime.utcnow()
    try:
        removed = db.query(UserSession).filter(UserSession.expires_at <= now).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Failed to purge expired sessions: {str(e)}")
        raise StorageError(str(e))
    return removed
