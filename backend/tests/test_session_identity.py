"""
Tests for anonymous session tokens.

Run tests with: pytest backend/tests/test_session_identity.py -v
"""

import re

from services.session_identity import (
    SESSION_KEY,
    clear_session,
    generate_session_token,
    get_or_create_token,
    is_valid_token,
)


class TestGenerateSessionToken:

    def test_token_format(self):
        token = generate_session_token()
        assert re.match(r"^session_\d{13,}_[0-9a-z]{13}$", token)

    def test_tokens_are_distinct(self):
        tokens = {generate_session_token() for _ in range(50)}
        assert len(tokens) == 50

    def test_generated_token_is_valid(self):
        assert is_valid_token(generate_session_token())


class TestGetOrCreateToken:

    def test_creates_and_stores_token_when_missing(self):
        store = {}
        token = get_or_create_token(store)
        assert store[SESSION_KEY] == token

    def test_returns_existing_token(self):
        store = {SESSION_KEY: "session_1_abc"}
        assert get_or_create_token(store) == "session_1_abc"
        assert store[SESSION_KEY] == "session_1_abc"

    def test_same_store_gives_same_token(self):
        store = {}
        assert get_or_create_token(store) == get_or_create_token(store)

    def test_replaces_malformed_token(self):
        store = {SESSION_KEY: "../../etc/passwd"}
        token = get_or_create_token(store)
        assert token != "../../etc/passwd"
        assert is_valid_token(token)

    def test_clear_session_forgets_token(self):
        store = {}
        first = get_or_create_token(store)
        clear_session(store)
        assert SESSION_KEY not in store
        assert get_or_create_token(store) != first

    def test_clear_session_without_token_is_noop(self):
        store = {}
        clear_session(store)
        assert store == {}


class TestIsValidToken:

    def test_rejects_empty_and_none(self):
        assert not is_valid_token("")
        assert not is_valid_token(None)

    def test_rejects_path_characters(self):
        assert not is_valid_token("a/b")
        assert not is_valid_token("a.b")

    def test_rejects_overlong_token(self):
        assert not is_valid_token("a" * 129)
        assert is_valid_token("a" * 128)
