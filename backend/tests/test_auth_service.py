"""
Session authenticator and credential store, exercised without HTTP.
"""

from datetime import timedelta

import pytest

from conftest import make_settings
from core.errors import DuplicateEmail, InvalidCredentials, Unauthenticated
from models.user import User
from models.user_session import UserSession
from services import auth_service, session_store, user_store


def test_register_stores_verifier_not_password(db, settings):
    ctx = auth_service.register(db, settings, "Grace Hopper", "grace@example.com", "cobol-rules")
    stored = db.query(User).filter(User.id == ctx.user.id).one()
    assert stored.hashed_password != "cobol-rules"
    assert stored.hashed_password.startswith("$2")
    assert ctx.session.user_id == ctx.user.id


def test_session_expiry_is_fixed_from_issuance(db, settings):
    ctx = auth_service.register(db, settings, "Grace Hopper", "grace@example.com", "cobol-rules")
    issued = ctx.session.created_at
    assert ctx.session.expires_at - issued == timedelta(hours=24)

    token = ctx.session.token
    assert auth_service.authenticate(db, settings, token, now=issued + timedelta(hours=23)).user.id == ctx.user.id

    with pytest.raises(Unauthenticated):
        auth_service.authenticate(db, settings, token, now=issued + timedelta(hours=24, seconds=1))
    assert session_store.get(db, token) is None


def test_touch_happens_at_most_once_per_interval(db, tmp_path):
    settings = make_settings(tmp_path, SESSION_TOUCH_AFTER_SECONDS=60)
    ctx = auth_service.register(db, settings, "Grace Hopper", "grace@example.com", "cobol-rules")
    issued = ctx.session.created_at

    auth_service.authenticate(db, settings, ctx.session.token, now=issued + timedelta(seconds=30))
    assert session_store.get(db, ctx.session.token).last_touched_at == issued

    later = issued + timedelta(seconds=90)
    auth_service.authenticate(db, settings, ctx.session.token, now=later)
    assert session_store.get(db, ctx.session.token).last_touched_at == later


def test_idle_timeout(db, tmp_path):
    settings = make_settings(tmp_path, SESSION_IDLE_TIMEOUT_MINUTES=30)
    ctx = auth_service.register(db, settings, "Grace Hopper", "grace@example.com", "cobol-rules")
    issued = ctx.session.created_at
    token = ctx.session.token

    # activity every 20 minutes keeps the session alive
    for minutes in (20, 40, 60):
        auth_service.authenticate(db, settings, token, now=issued + timedelta(minutes=minutes))

    with pytest.raises(Unauthenticated):
        auth_service.authenticate(db, settings, token, now=issued + timedelta(minutes=95))


def test_session_of_deleted_user_is_invalid(db, settings):
    ctx = auth_service.register(db, settings, "Grace Hopper", "grace@example.com", "cobol-rules")
    token = ctx.session.token
    db.query(User).filter(User.id == ctx.user.id).delete()
    db.commit()

    with pytest.raises(Unauthenticated):
        auth_service.authenticate(db, settings, token)
    assert db.query(UserSession).filter(UserSession.token == token).first() is None


@pytest.mark.parametrize("token", [None, "", "not-a-session"])
def test_authenticate_unknown_tokens(db, settings, token):
    with pytest.raises(Unauthenticated):
        auth_service.authenticate(db, settings, token)


def test_logout_then_authenticate(db, settings):
    ctx = auth_service.register(db, settings, "Grace Hopper", "grace@example.com", "cobol-rules")
    auth_service.logout(db, ctx.session.token)
    auth_service.logout(db, ctx.session.token)
    with pytest.raises(Unauthenticated):
        auth_service.authenticate(db, settings, ctx.session.token)


def test_each_login_opens_a_new_session(db, settings):
    first = auth_service.register(db, settings, "Grace Hopper", "grace@example.com", "cobol-rules")
    second = auth_service.login(db, settings, "grace@example.com", "cobol-rules")
    assert first.session.token != second.session.token
    assert auth_service.authenticate(db, settings, first.session.token).user.id == first.user.id


def test_login_errors_match(db, settings):
    auth_service.register(db, settings, "Grace Hopper", "grace@example.com", "cobol-rules")
    with pytest.raises(InvalidCredentials) as wrong:
        auth_service.login(db, settings, "grace@example.com", "fortran")
    with pytest.raises(InvalidCredentials) as unknown:
        auth_service.login(db, settings, "nobody@example.com", "fortran")
    assert wrong.value.detail == unknown.value.detail
    assert wrong.value.status_code == unknown.value.status_code == 401


def test_store_rejects_duplicate_email_at_write_time(db, settings):
    # simulates a registration that passed the lookup while another one committed
    user_store.create(db, "First", "race@example.com", "hash-1")
    with pytest.raises(DuplicateEmail):
        user_store.create(db, "Second", "race@example.com", "hash-2")
    assert db.query(User).filter(User.email == "race@example.com").count() == 1


def test_purge_expired(db, settings):
    ctx = auth_service.register(db, settings, "Grace Hopper", "grace@example.com", "cobol-rules")
    later = ctx.session.created_at + timedelta(days=2)
    assert session_store.purge_expired(db, now=later) == 1
    assert session_store.get(db, ctx.session.token) is None
