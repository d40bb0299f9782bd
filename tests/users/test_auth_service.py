from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from committee_attendance.core.enums import Role
from committee_attendance.core.exceptions import AuthenticationError, ValidationError
from committee_attendance.users.tokens import TokenCodec


def test_register_then_login(container):
    auth = container.auth_service

    registered = auth.register(email=" Alice@Example.com ", password="secret1", name="Alice")
    assert registered.user.email == "alice@example.com"
    assert registered.user.role == Role.MEMBER

    logged_in = auth.login(email="alice@example.com", password="secret1")
    assert logged_in.user.user_id == registered.user.user_id

    principal = auth.resolve_principal(logged_in.token)
    assert principal.user_id == registered.user.user_id
    assert not principal.is_admin


def test_register_validation(container):
    auth = container.auth_service
    auth.register(email="bob@example.com", password="secret1", name="Bob")

    with pytest.raises(ValidationError, match="User already exists"):
        auth.register(email="BOB@example.com", password="secret1", name="Bob")
    with pytest.raises(ValidationError):
        auth.register(email="carol@example.com", password="12345", name="Carol")
    with pytest.raises(ValidationError):
        auth.register(email="", password="secret1", name="Carol")


def test_login_failures(container, store):
    store.add_user("Legacy")
    auth = container.auth_service

    with pytest.raises(ValidationError):
        auth.login(email="legacy@example.com", password="")
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        auth.login(email="nobody@example.com", password="secret1")
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        auth.login(email="legacy@example.com", password="secret1")


def test_resolve_principal_rejects_bad_tokens(container, store, tokens):
    auth = container.auth_service

    with pytest.raises(AuthenticationError, match="Authentication required"):
        auth.resolve_principal(None)
    with pytest.raises(AuthenticationError):
        auth.resolve_principal("not-a-jwt")
    with pytest.raises(AuthenticationError, match="User not found"):
        auth.resolve_principal(tokens.issue(404))

    foreign = TokenCodec("other-secret").issue(store.add_user("Eve").user_id)
    with pytest.raises(AuthenticationError):
        auth.resolve_principal(foreign)


def test_expired_token_is_rejected(tokens):
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    token = tokens.issue(1, now=issued)

    with pytest.raises(AuthenticationError, match="Invalid or expired token"):
        tokens.decode(token)
