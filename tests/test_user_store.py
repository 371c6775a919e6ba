"""Unit tests for auth/store.py -- UserStore repository methods.

Covers:
- create_principal() assigns a UUID and timestamps and stores the credential
- duplicate email raises EmailTaken
- find_by_email() / find_by_id() return None for unknown keys
- list_principals() returns newest first
- database failures surface as PersistenceError; ping() reports them as False
"""

from __future__ import annotations

import uuid
from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from auth.errors import EmailTaken, PersistenceError
from auth.store import UserStore


class TestCreate:
    def test_create_assigns_id_and_timestamps(self, user_store: UserStore) -> None:
        p = user_store.create_principal("a@x.com", "Alice", "$argon2id$stub")
        assert isinstance(p.id, uuid.UUID)
        assert p.created_at and p.updated_at
        assert p.password_hash == "$argon2id$stub"

    def test_round_trip_by_email_and_id(self, user_store: UserStore) -> None:
        created = user_store.create_principal("a@x.com", "Alice", "$argon2id$stub")
        by_email = user_store.find_by_email("a@x.com")
        by_id = user_store.find_by_id(created.id)
        assert by_email == created
        assert by_id == created

    def test_duplicate_email_raises(self, user_store: UserStore) -> None:
        user_store.create_principal("a@x.com", "Alice", "h1")
        with pytest.raises(EmailTaken):
            user_store.create_principal("a@x.com", "Alice Again", "h2")
        # The original row is untouched.
        assert user_store.find_by_email("a@x.com").name == "Alice"

    def test_password_hash_not_in_repr(self, user_store: UserStore) -> None:
        p = user_store.create_principal("a@x.com", "Alice", "$argon2id$secretdigest")
        assert "secretdigest" not in repr(p)


class TestQueries:
    def test_unknown_email_is_none(self, user_store: UserStore) -> None:
        assert user_store.find_by_email("nobody@x.com") is None

    def test_email_lookup_is_exact(self, user_store: UserStore) -> None:
        user_store.create_principal("a@x.com", "Alice", "h")
        assert user_store.find_by_email("A@X.COM") is None

    def test_unknown_id_is_none(self, user_store: UserStore) -> None:
        assert user_store.find_by_id(uuid.uuid4()) is None

    def test_list_newest_first(self, user_store: UserStore) -> None:
        stamps = ["2026-01-01T00:00:00+00:00", "2026-01-02T00:00:00+00:00"]
        with mock.patch("auth.store._now_iso", side_effect=stamps):
            first = user_store.create_principal("a@x.com", "Alice", "h")
            second = user_store.create_principal("b@x.com", "Bob", "h")
        ids = [p.id for p in user_store.list_principals()]
        assert ids == [second.id, first.id]

    def test_ping(self, user_store: UserStore) -> None:
        assert user_store.ping() is True


class TestDatabaseFailures:
    def _failing_connect(self, store: UserStore):
        err = OperationalError("SELECT", {}, Exception("database is locked"))
        return mock.patch.object(store.engine, "connect", side_effect=err)

    def test_lookup_failure_is_persistence_error(self, user_store: UserStore) -> None:
        with self._failing_connect(user_store):
            with pytest.raises(PersistenceError):
                user_store.find_by_email("a@x.com")

    def test_list_failure_is_persistence_error(self, user_store: UserStore) -> None:
        with self._failing_connect(user_store):
            with pytest.raises(PersistenceError):
                user_store.list_principals()

    def test_create_failure_is_persistence_error(self, user_store: UserStore) -> None:
        err = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with mock.patch.object(user_store.engine, "begin", side_effect=err):
            with pytest.raises(PersistenceError):
                user_store.create_principal("a@x.com", "Alice", "h")

    def test_ping_failure_is_false(self, user_store: UserStore) -> None:
        with self._failing_connect(user_store):
            assert user_store.ping() is False
