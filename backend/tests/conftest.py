"""
Test configuration and fixtures.
"""

import os
import threading

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from core.dependencies import get_uploader
from core.errors import UploadError
from db.base import Base
from db.session import build_engine, build_session_factory
from main import create_app
import models.user  # noqa: F401
import models.user_session  # noqa: F401
import models.medical_record  # noqa: F401


class FakeUploader:
    """Stands in for S3: records what was pushed and can be told to fail by filename."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.uploaded = []
        self.seen_paths = []
        self.deleted = []
        self._lock = threading.Lock()

    def upload(self, local_path, folder, filename=None):
        assert os.path.exists(local_path)
        name = filename or os.path.basename(local_path)
        with self._lock:
            self.seen_paths.append(local_path)
        if name in self.fail_on:
            raise UploadError(f"upload rejected for {name}")
        with open(local_path, "rb") as fh:
            data = fh.read()
        url = f"https://files.example.test/{folder}/{name}"
        with self._lock:
            self.uploaded.append((url, data))
        return url

    def delete(self, url):
        with self._lock:
            self.deleted.append(url)


def make_settings(tmp_path, **overrides):
    values = dict(
        _env_file=None,
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        UPLOAD_TMP_DIR=str(tmp_path / "uploads"),
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def make_client(tmp_path, uploader):
    """Factory for a started app + client; keyword arguments override settings."""
    clients = []

    def _make(raise_server_exceptions=True, **overrides):
        app = create_app(make_settings(tmp_path, **overrides))
        app.dependency_overrides[get_uploader] = lambda: uploader
        client = TestClient(app, raise_server_exceptions=raise_server_exceptions)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def db(settings):
    """Bare SQLAlchemy session for service-level tests."""
    engine = build_engine(settings)
    Base.metadata.create_all(bind=engine)
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def register(client, fullname="Ada Lovelace", email="ada@example.com", password="s3cret-pass"):
    return client.post("/register", json={"fullname": fullname, "email": email, "password": password})


def app_db(client):
    return client.app.state.session_factory()
