"""Unit tests for the session-backed request store.

This test suite covers:
    - Token format and uniqueness
    - Storing copies with owner binding and expiration
    - Restoring, redirecting and rejecting on lookup
    - Flash parameter propagation
"""

import re
from datetime import UTC, datetime, timedelta

import pytest

from front_controller.config import ApplicationConfig
from front_controller.core import request_store
from front_controller.core.request_store import RequestStore, generate_token
from front_controller.models import (
    ACTION_KEY,
    FLASH_KEY,
    REQUEST_KEY,
    Redirect,
    Request,
    RequestFlag,
    StoredRequestEntry,
)
from front_controller.security import StaticUser
from front_controller.session.memory import MemorySessionStorage


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(clock):
    return MemorySessionStorage(clock=clock).open(None)


@pytest.fixture
def store(session):
    return RequestStore(session, StaticUser(None))


@pytest.fixture
def article_request():
    return Request(
        presenter_name="Article",
        method="POST",
        parameters={ACTION_KEY: "edit", "id": 12},
        post={"title": "Draft"},
    )


def current(presenter_name, **parameters):
    return Request(presenter_name=presenter_name, parameters=parameters)


# ============================================================================
# Tokens
# ============================================================================


class TestTokens:
    @pytest.mark.parametrize("length", [4, 5, 16, 64])
    def test_generate_token_format(self, length):
        token = generate_token(length)

        assert re.fullmatch(rf"[0-9a-z]{{{length}}}", token)

    def test_stored_token_uses_configured_length(self, session):
        store = RequestStore(session, StaticUser(None), ApplicationConfig(request_token_length=8))

        token = store.store_request(Request(presenter_name="Article"))

        assert re.fullmatch(r"[0-9a-z]{8}", token)

    def test_default_token_length_is_five(self, store, article_request):
        assert len(store.store_request(article_request)) == 5

    def test_token_collision_is_regenerated(self, store, article_request, monkeypatch):
        tokens = iter(["aaaaa", "aaaaa", "bbbbb"])
        monkeypatch.setattr(request_store, "generate_token", lambda length: next(tokens))

        first = store.store_request(article_request)
        second = store.store_request(article_request)

        assert first == "aaaaa"
        assert second == "bbbbb"
        assert len(store.section) == 2

    def test_tokens_are_unique_across_many_stores(self, store, article_request):
        tokens = {store.store_request(article_request) for _ in range(200)}

        assert len(tokens) == 200


# ============================================================================
# store_request
# ============================================================================


class TestStoreRequest:
    def test_store_writes_entry_into_namespace(self, store, session, article_request):
        token = store.store_request(article_request)

        entry = session.get_section("front_controller/requests")[token]
        assert isinstance(entry, StoredRequestEntry)
        assert entry.owner_id is None
        assert entry.request == article_request

    def test_store_uses_configured_namespace(self, session, article_request):
        config = ApplicationConfig(session_namespace="app/backlinks")
        store = RequestStore(session, StaticUser(None), config)

        token = store.store_request(article_request)

        assert token in session.get_section("app/backlinks")
        assert not session.has_section("front_controller/requests")

    def test_store_binds_owner(self, session, article_request):
        store = RequestStore(session, StaticUser(42))

        token = store.store_request(article_request)

        assert store.section[token].owner_id == 42

    def test_store_keeps_a_copy(self, store, article_request):
        token = store.store_request(article_request)

        article_request.parameters["id"] = 99
        article_request.post["title"] = "Changed"

        stored = store.section[token].request
        assert stored.get_parameter("id") == 12
        assert stored.post == {"title": "Draft"}

    def test_default_expiration(self, store, clock, article_request):
        token = store.store_request(article_request)

        clock.advance(599)
        assert token in store.section

        clock.advance(1)
        assert token not in store.section

    @pytest.mark.parametrize(
        "expiration, seconds",
        [
            (30, 30),
            (timedelta(minutes=2), 120),
            ("+ 5 minutes", 300),
            ("1 hour", 3600),
        ],
    )
    def test_custom_expiration(self, store, clock, article_request, expiration, seconds):
        token = store.store_request(article_request, expiration)

        clock.advance(seconds - 1)
        assert token in store.section

        clock.advance(1)
        assert token not in store.section

    def test_invalid_expiration_is_rejected(self, store, article_request):
        with pytest.raises(ValueError):
            store.store_request(article_request, "someday")

        assert len(store.section) == 0

    def test_expiration_is_per_token(self, store, clock, article_request):
        short = store.store_request(article_request, 10)
        long = store.store_request(article_request, 100)

        clock.advance(50)

        assert short not in store.section
        assert long in store.section


# ============================================================================
# get_stored_request
# ============================================================================


class TestGetStoredRequest:
    def test_restore_same_presenter(self, store, article_request):
        token = store.store_request(article_request)

        restored = store.get_stored_request(token, current("Article"))

        assert isinstance(restored, Request)
        assert restored.has_flag(RequestFlag.RESTORED)
        assert restored.presenter_name == "Article"
        assert restored.method == "POST"
        assert restored.parameters == {ACTION_KEY: "edit", "id": 12}
        assert restored.post == {"title": "Draft"}

    def test_restore_returns_fresh_copies(self, store, article_request):
        token = store.store_request(article_request)

        first = store.get_stored_request(token, current("Article"))
        first.parameters["id"] = 0
        second = store.get_stored_request(token, current("Article"))

        assert first is not second
        assert second.get_parameter("id") == 12
        assert not store.section[token].request.has_flag(RequestFlag.RESTORED)

    def test_restore_can_be_repeated(self, store, article_request):
        """Lookups do not consume the token."""
        token = store.store_request(article_request)

        store.get_stored_request(token, current("Article"))

        assert token in store.section

    def test_restore_carries_flash_id(self, store, article_request):
        token = store.store_request(article_request)

        restored = store.get_stored_request(token, current("Article", **{FLASH_KEY: "f1"}))

        assert restored.get_parameter(FLASH_KEY) == "f1"

    def test_restore_without_flash_id(self, store, article_request):
        token = store.store_request(article_request)

        restored = store.get_stored_request(token, current("Article"))

        assert FLASH_KEY not in restored.parameters

    def test_other_presenter_returns_redirect(self, store, article_request):
        token = store.store_request(article_request)

        outcome = store.get_stored_request(token, current("Homepage"))

        assert isinstance(outcome, Redirect)
        assert outcome.destination == ":Article:edit"
        assert outcome.presenter_name == "Article"
        assert outcome.action == "edit"
        assert outcome.parameters == {"id": 12, REQUEST_KEY: token}

    def test_redirect_without_action_uses_default(self, store):
        token = store.store_request(Request(presenter_name="Admin:Article", parameters={"id": 1}))

        outcome = store.get_stored_request(token, current("Homepage"))

        assert outcome.destination == ":Admin:Article:default"
        assert ACTION_KEY not in outcome.parameters

    def test_unknown_token(self, store):
        assert store.get_stored_request("nope0", current("Article")) is None

    def test_expired_token(self, store, clock, article_request):
        token = store.store_request(article_request, 60)

        clock.advance(61)

        assert store.get_stored_request(token, current("Article")) is None

    def test_foreign_value_in_namespace_is_ignored(self, store):
        store.section["abcde"] = "not an entry"

        assert store.get_stored_request("abcde", current("Article")) is None

    def test_other_owner_is_rejected(self, session, article_request):
        token = RequestStore(session, StaticUser(1)).store_request(article_request)

        for identity in (2, None):
            store = RequestStore(session, StaticUser(identity))
            assert store.get_stored_request(token, current("Article")) is None

    def test_owner_can_restore(self, session, article_request):
        token = RequestStore(session, StaticUser(1)).store_request(article_request)

        store = RequestStore(session, StaticUser(1))
        restored = store.get_stored_request(token, current("Article"))

        assert restored is not None

    def test_anonymous_entry_readable_after_login(self, session, article_request):
        token = RequestStore(session, StaticUser(None)).store_request(article_request)

        store = RequestStore(session, StaticUser(7))
        restored = store.get_stored_request(token, current("Article"))

        assert restored.has_flag(RequestFlag.RESTORED)
