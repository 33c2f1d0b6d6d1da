"""
Settings loading.
"""

import pydantic
import pytest

from core.config import RecordWritePolicy, Settings, load_settings


def test_load_settings_requires_secrets(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError):
        load_settings(_env_file=None)


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "from-env")
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.setenv("RECORD_WRITE_POLICY", "reject")
    monkeypatch.setenv("ALLOW_PUBLIC_RECORD_LOOKUP", "false")
    settings = load_settings(_env_file=None)
    assert settings.SECRET_KEY == "from-env"
    assert settings.RECORD_WRITE_POLICY is RecordWritePolicy.REJECT
    assert settings.ALLOW_PUBLIC_RECORD_LOOKUP is False
    assert settings.SESSION_TTL_HOURS == 24


def test_settings_are_immutable():
    settings = Settings(_env_file=None, SECRET_KEY="k", DATABASE_URL="sqlite://")
    with pytest.raises(pydantic.ValidationError):
        settings.SECRET_KEY = "other"


@pytest.mark.parametrize("raw, expected", [
    ("", []),
    ('["http://localhost:3000", "https://mediband.vercel.app"]',
     ["http://localhost:3000", "https://mediband.vercel.app"]),
    ("http://localhost:3000, https://mediband.netlify.app ,",
     ["http://localhost:3000", "https://mediband.netlify.app"]),
])
def test_allowed_origins_parsing(raw, expected):
    settings = Settings(_env_file=None, ALLOWED_ORIGINS=raw)
    assert settings.allowed_origins == expected


def test_cookie_policy_follows_environment():
    assert Settings(_env_file=None).cookie_samesite == "lax"
    prod = Settings(_env_file=None, ENVIRONMENT="production")
    assert prod.is_production
    assert prod.cookie_samesite == "none"
