from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import Optional
from core.config import Settings
from core.dependencies import get_optional_auth_context, get_session_token, get_settings
from db.session import get_db
from schemas.user import AuthResponse, AuthStatus, LoginRequest, RegisterRequest
from services import auth_service
from services.auth_service import AuthContext
from utils.security import sign_session_token
import logging


router = APIRouter()


def _set_session_cookie(response: Response, ctx: AuthContext, settings: Settings) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=sign_session_token(ctx.session.token, settings),
        max_age=settings.SESSION_TTL_HOURS * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite=settings.cookie_samesite,
    )


@router.post("/register", response_model=AuthResponse)
def register(
    body: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    ctx = auth_service.register(db, settings, body.fullname, body.email, body.password)
    _set_session_cookie(response, ctx, settings)
    return {"message": "User registered and logged in!", "user": ctx.user}


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    ctx = auth_service.login(db, settings, body.email, body.password)
    _set_session_cookie(response, ctx, settings)
    return {"message": "Login successful", "user": ctx.user}


@router.post("/logout")
def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    auth_service.logout(db, token)
    response.delete_cookie(
        settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite=settings.cookie_samesite,
    )
    logging.info("Session closed")
    return {"message": "Logout successful"}


@router.get("/auth/status", response_model=AuthStatus)
def auth_status(ctx: Optional[AuthContext] = Depends(get_optional_auth_context)):
    if ctx is None:
        return AuthStatus(isAuthenticated=False)
    return {"isAuthenticated": True, "user": ctx.user, "sessionExpiresAt": ctx.session.expires_at}
