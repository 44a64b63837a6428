import threading
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from main import app
from routers.logs.backend import BackendError, get_backend
from settings import Settings, get_settings


class FakeBackend:
    """In-memory stand-in for SupabaseClient (same select/insert contract)."""

    def __init__(self, rows=None):
        self.rows       = list(rows or [])
        self.inserted   = []
        self.returning  = []
        self.selects    = []
        self.fail_when  = lambda record: False
        self.select_error = None
        self._lock      = threading.Lock()

    def select(self, limit, offset=0, session=None):
        self.selects.append((limit, offset, session))
        if self.select_error is not None:
            raise self.select_error
        rows = [r for r in self.rows if session is None or r.get("session_id") == session]
        return rows[offset:offset + limit]

    def insert(self, record, returning=True):
        if self.fail_when(record):
            raise BackendError("Supabase insert error: 500 boom", status_code=500, body="boom")
        with self._lock:
            self.inserted.append(record)
            self.returning.append(returning)
            row = {
                **record,
                "id":         len(self.inserted),
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
        return [row] if returning else None


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_key="anon-key",
        batch_workers=8,
        max_meta_bytes=1024,
    )


@pytest.fixture
def client(backend, settings):
    app.dependency_overrides[get_backend] = lambda: backend
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
