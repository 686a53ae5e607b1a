"""Tests for principal-to-user resolution."""

import pytest

from pulse_feed.core.errors import Unauthenticated
from pulse_feed.models import User
from pulse_feed.schemas.user import Principal
from pulse_feed.services import identity
from pulse_feed.services.identity import (
    default_username,
    get_user_by_principal,
    record_login,
    require_user,
    resolve_user,
    to_author_summary,
)


def test_first_resolution_creates_user_with_defaults(db_session) -> None:
    principal = Principal(principal_id="idp|0123456789abcdef")

    user = resolve_user(db_session, principal)

    assert user.id is not None
    assert user.username == "user_idp|0123"
    assert user.username == default_username(principal.principal_id)
    assert user.name == user.username
    assert user.created_at is not None
    assert user.last_login_at is not None
    assert db_session.query(User).count() == 1


def test_resolution_returns_existing_user_without_rewriting(db_session) -> None:
    first = resolve_user(db_session, Principal(principal_id="idp|dana", display_name="Dana"))
    again = resolve_user(
        db_session,
        Principal(principal_id="idp|dana", display_name="Someone Else", username="other"),
    )

    assert again.id == first.id
    assert again.name == "Dana"
    assert db_session.query(User).count() == 1


def test_record_login_refreshes_timestamp_and_profile(db_session) -> None:
    user = resolve_user(db_session, Principal(principal_id="idp|erin", display_name="Erin"))
    first_login = user.last_login_at

    refreshed = record_login(
        db_session,
        Principal(
            principal_id="idp|erin",
            display_name="Erin B.",
            username="erinb",
            avatar_url="https://img.example/erin.png",
        ),
    )

    assert refreshed.id == user.id
    assert refreshed.name == "Erin B."
    assert refreshed.username == "erinb"
    assert refreshed.avatar_url == "https://img.example/erin.png"
    assert refreshed.last_login_at >= first_login


def test_record_login_is_idempotent(db_session) -> None:
    principal = Principal(principal_id="idp|finn", display_name="Finn", username="finn")

    first = record_login(db_session, principal)
    second = record_login(db_session, principal)

    assert first.id == second.id
    assert second.username == "finn"
    assert db_session.query(User).count() == 1


def test_taken_username_falls_back_to_default(db_session) -> None:
    resolve_user(db_session, Principal(principal_id="idp|one", username="taken"))
    second = resolve_user(db_session, Principal(principal_id="idp|two", username="taken"))

    assert second.username == default_username("idp|two")


def test_default_username_prefix_collision_uses_full_id(db_session) -> None:
    first = resolve_user(db_session, Principal(principal_id="idp|shared-1"))
    second = resolve_user(db_session, Principal(principal_id="idp|shared-2"))

    assert first.username == "user_idp|shar"
    assert second.username == "user_idp|shared-2"


def test_require_user_rejects_anonymous_callers(alice) -> None:
    assert require_user(alice) is alice
    with pytest.raises(Unauthenticated):
        require_user(None)


def test_author_summary_uses_live_profile(db_session, alice) -> None:
    summary = to_author_summary(alice)
    assert summary.id == alice.id
    assert summary.username == "alice"
    assert summary.avatar == "https://img.example/alice.png"
    assert get_user_by_principal(db_session, "idp|alice").id == alice.id


def test_username_claimed_concurrently_retries_with_fallback(db_session, monkeypatch) -> None:
    resolve_user(db_session, Principal(principal_id="idp|one", username="taken"))
    real_username_taken = identity._username_taken
    calls = {"n": 0}

    def stale_first_check(db, username, exclude_user_id):
        calls["n"] += 1
        if calls["n"] == 1:
            # The availability check ran before the other insert committed.
            return False
        return real_username_taken(db, username, exclude_user_id)

    monkeypatch.setattr(identity, "_username_taken", stale_first_check)

    user = resolve_user(db_session, Principal(principal_id="idp|two", username="taken"))

    assert user.id is not None
    assert user.username == default_username("idp|two")
    assert db_session.query(User).count() == 2
