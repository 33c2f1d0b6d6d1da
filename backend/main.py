from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from routes import auth, files, medical_record
import logging
from typing import Optional
from core.config import Settings, load_settings
from core.errors import AppError
from db.base import Base
from db.session import build_engine, build_session_factory
from services import session_store
import models.user  # noqa: F401
import models.user_session  # noqa: F401
import models.medical_record  # noqa: F401


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around one immutable Settings instance.

    Run with ``uvicorn main:create_app --factory``.
    """
    settings = settings or load_settings()
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    app = FastAPI(title="Medical Intake Form API v1.0")
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    allow_origins = settings.allowed_origins
    logging.info(f"Allowed CORS origins: {allow_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        # session cookie must travel cross-origin
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc, AppError):
            return JSONResponse(status_code=exc.status_code, content={"message": exc.detail, **exc.extra})
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"message": "Route not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
        return JSONResponse(status_code=400, content={"message": "Invalid request", "fields": fields})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logging.exception("Unhandled server error")
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error", "error": str(exc)}
        )

    app.include_router(auth.router, tags=["auth"])
    app.include_router(medical_record.router, tags=["medical-record"])
    app.include_router(files.router, tags=["files"])

    @app.on_event("startup")
    def startup_event():
        logging.info("Creating database tables (if not exist)...")
        Base.metadata.create_all(bind=app.state.engine)
        db = app.state.session_factory()
        try:
            removed = session_store.purge_expired(db)
            if removed:
                logging.info(f"Purged {removed} expired session(s)")
        finally:
            db.close()

    @app.on_event("shutdown")
    def shutdown_event():
        app.state.engine.dispose()

    @app.get("/")
    def read_root():
        return {"text": "Hello, World!"}

    @app.get('/health')
    def health_check():
        return {"status": "healthy"}

    return app
