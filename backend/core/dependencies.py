"""Shared dependencies for FastAPI dependency injection."""

from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from core.config import Settings
from core.errors import Unauthenticated
from db.session import get_db
from services import auth_service
from services.auth_service import AuthContext
from services.storage_service import S3Uploader
from utils.security import unsign_session_cookie


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_uploader(settings: Settings = Depends(get_settings)) -> S3Uploader:
    return S3Uploader(settings)


def get_session_token(request: Request, settings: Settings = Depends(get_settings)) -> Optional[str]:
    return unsign_session_cookie(request.cookies.get(settings.SESSION_COOKIE_NAME), settings)


def get_auth_context(
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthContext:
    """401 unless the request carries a live session."""
    return auth_service.authenticate(db, settings, token)


def get_optional_auth_context(
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Optional[AuthContext]:
    if not token:
        return None
    try:
        return auth_service.authenticate(db, settings, token)
    except Unauthenticated:
        return None
