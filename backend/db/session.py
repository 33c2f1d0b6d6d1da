from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from core.config import Settings


def build_engine(settings: Settings) -> Engine:
    url = str(settings.DATABASE_URL)
    engine_kwargs = {
        "pool_pre_ping": True,
        "pool_recycle": 1800,
    }

    parsed = make_url(url)
    if parsed.drivername.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        # in-memory databases live on a single shared connection
        if parsed.database in (None, "", ":memory:"):
            engine_kwargs["poolclass"] = StaticPool

    return create_engine(url, **engine_kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
