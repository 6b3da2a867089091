"""Unit tests for the session store."""

import time

from gisph_mcp.sessions.store import SessionContext, SessionStore, new_session_id


class TestSessionContext:
    """Tests for per-connection credential binding."""

    def test_credential_is_set_once(self):
        """Test a bound credential is never replaced."""
        context = SessionContext("s1", "sse")

        assert context.bind_credential("K") is True
        assert context.bind_credential("K2") is False
        assert context.credential == "K"

    def test_empty_credential_does_not_bind(self):
        """Test empty values leave the session unbound."""
        context = SessionContext("s1", "streamable")

        assert context.bind_credential("") is False
        assert context.bind_credential(None) is False
        assert context.credential is None
        assert context.bind_credential("K") is True

    def test_repr_hides_credential(self):
        """Test the credential never appears in the repr."""
        context = SessionContext("s1", "sse", credential="SECRET")

        assert "SECRET" not in repr(context)
        assert "bound" in repr(context)


class TestSessionStore:
    """Tests for SessionStore."""

    def test_bind_creates_session(self):
        """Test binding an unknown id creates the session."""
        store = SessionStore()

        context = store.bind("s1", "K")

        assert "s1" in store
        assert len(store) == 1
        assert context.credential == "K"
        assert context.transport == "streamable"

    def test_bind_is_idempotent(self):
        """Test rebinding keeps the first credential."""
        store = SessionStore()
        store.bind("s1", "K")

        context = store.bind("s1", "K2")

        assert context.credential == "K"
        assert store.get("s1") is context
        assert len(store) == 1

    def test_get_unknown_returns_none(self):
        """Test lookups of unknown or empty ids return None."""
        store = SessionStore()

        assert store.get("missing") is None
        assert store.get(None) is None
        assert store.get("") is None

    def test_discard(self):
        """Test discarding removes the session and reports whether it existed."""
        store = SessionStore()
        store.bind("s1", "K")

        assert store.discard("s1") is True
        assert store.discard("s1") is False
        assert store.get("s1") is None

    def test_entries_expire(self):
        """Test sessions disappear after the TTL elapses."""
        store = SessionStore(ttl_seconds=0.05)
        store.bind("s1", "K")

        time.sleep(0.1)

        assert store.get("s1") is None

    def test_maxsize_evicts_oldest(self):
        """Test the store stays bounded."""
        store = SessionStore(maxsize=2)
        for session_id in ("a", "b", "c"):
            store.bind(session_id, "K")

        assert len(store) == 2
        assert "c" in store

    def test_clear(self):
        """Test clear removes every session."""
        store = SessionStore()
        store.bind("a", "K")
        store.bind("b", "K")

        store.clear()

        assert len(store) == 0


def test_new_session_id_is_unique():
    """Test generated ids are opaque and distinct."""
    ids = {new_session_id() for _ in range(100)}

    assert len(ids) == 100
    assert all(len(session_id) == 32 for session_id in ids)
