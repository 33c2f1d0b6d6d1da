from jose import JWTError, jwt
from passlib.context import CryptContext
from core.config import Settings
from typing import Optional
import logging

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """Burn the same time as a real verify, for unknown accounts."""
    pwd_context.dummy_verify()


def get_password_hash(password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return pwd_context.hash(password)


def sign_session_token(token: str, settings: Settings) -> str:
    """Wrap an opaque session token into the signed cookie value."""
    return jwt.encode({"sid": token}, str(settings.SECRET_KEY), algorithm=settings.ALGORITHM)


def unsign_session_cookie(cookie_value: Optional[str], settings: Settings) -> Optional[str]:
    """Return the session token carried by a cookie, or None if absent or tampered."""
    if not cookie_value:
        return None
    try:
        payload = jwt.decode(cookie_value, str(settings.SECRET_KEY), algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logging.warning(f"Session cookie rejected: {e}")
        return None
    sid = payload.get("sid")
    if not isinstance(sid, str) or not sid:
        return None
    return sid
