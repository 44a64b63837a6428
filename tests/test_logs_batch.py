import threading
import time

import pytest

from conftest import FakeBackend


def _entries(n, prefix="msg"):
    return [{"level": "info", "message": f"{prefix}-{i}"} for i in range(n)]


class TestBatchValidation:
    @pytest.mark.parametrize("body", [
        {},
        {"logs": None},
        {"logs": "not a list"},
        {"logs": {"level": "info"}},
        {"logs": []},
        [],
    ])
    def test_bad_logs_field_is_400(self, client, backend, body):
        resp = client.post("/logs/batch", json=body)

        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid logs array"}
        assert backend.inserted == []


class TestBatchInsert:
    def test_all_entries_saved(self, client, backend):
        resp = client.post("/logs/batch", json={"logs": _entries(5)})

        assert resp.status_code == 201
        assert resp.json() == {"success": True, "total": 5, "saved": 5, "failed": 0}
        assert len(backend.inserted) == 5
        assert all(r is False for r in backend.returning)
        assert {r["message"] for r in backend.inserted} == {f"msg-{i}" for i in range(5)}

    def test_entries_get_defaults_and_expiry(self, client, backend):
        client.post(
            "/logs/batch",
            json={"logs": _entries(3)},
            headers={"User-Agent": "BatchAgent/2", "Referer": "https://app.example/b"},
        )

        for record in backend.inserted:
            assert record["session_id"] == "unknown"
            assert record["category"] == "system"
            assert record["source"] == "Unknown"
            assert record["user_agent"] == "BatchAgent/2"
            assert record["url"] == "https://app.example/b"
            assert record["expires_at"].endswith("Z")

    def test_partial_failure_is_counted_not_raised(self, client, backend):
        backend.fail_when = lambda record: record["message"].endswith(("-1", "-3"))
        resp = client.post("/logs/batch", json={"logs": _entries(6)})

        assert resp.status_code == 201
        body = resp.json()
        assert body["total"] == 6
        assert body["saved"] == 4
        assert body["failed"] == 2
        assert body["saved"] + body["failed"] == body["total"]

    def test_every_entry_failing_still_201(self, client, backend):
        backend.fail_when = lambda record: True
        resp = client.post("/logs/batch", json={"logs": _entries(4)})

        assert resp.status_code == 201
        assert resp.json() == {"success": True, "total": 4, "saved": 0, "failed": 4}

    def test_invalid_entries_fail_without_outbound_call(self, client, backend):
        logs = [
            {"level": "info", "message": "ok"},
            {"message": "no level"},
            {"level": "info"},
            "not an object",
            {"level": "info", "message": "big", "meta": {"blob": "x" * 4096}},
        ]
        resp = client.post("/logs/batch", json={"logs": logs})

        assert resp.json() == {"success": True, "total": 5, "saved": 1, "failed": 4}
        assert [r["message"] for r in backend.inserted] == ["ok"]

    def test_batch_is_truncated_to_first_100(self, client, backend):
        resp = client.post("/logs/batch", json={"logs": _entries(150)})

        assert resp.status_code == 201
        assert resp.json() == {"success": True, "total": 100, "saved": 100, "failed": 0}
        assert {r["message"] for r in backend.inserted} == {f"msg-{i}" for i in range(100)}


class TestBatchConcurrency:
    class _SlowBackend(FakeBackend):
        """Counts how many inserts are in flight at once."""

        def __init__(self, delay=0.05, slow_message=None, slow_delay=0.5):
            super().__init__()
            self.delay        = delay
            self.slow_message = slow_message
            self.slow_delay   = slow_delay
            self.active       = 0
            self.peak         = 0
            self.finished     = []
            self._count_lock  = threading.Lock()

        def insert(self, record, returning=True):
            with self._count_lock:
                self.active += 1
                self.peak = max(self.peak, self.active)
            try:
                slow = record["message"] == self.slow_message
                time.sleep(self.slow_delay if slow else self.delay)
                return super().insert(record, returning)
            finally:
                with self._count_lock:
                    self.active -= 1
                    self.finished.append(record["message"])

    def _use(self, backend):
        from main import app
        from routers.logs.backend import get_backend

        app.dependency_overrides[get_backend] = lambda: backend

    def test_inserts_overlap_up_to_worker_bound(self, client, settings):
        slow = self._SlowBackend(delay=0.05)
        self._use(slow)

        started = time.monotonic()
        resp = client.post("/logs/batch", json={"logs": _entries(16)})
        elapsed = time.monotonic() - started

        assert resp.json() == {"success": True, "total": 16, "saved": 16, "failed": 0}
        assert 1 < slow.peak <= settings.batch_workers
        # 16 × 50 ms back to back would take 0.8 s
        assert elapsed < 0.6

    def test_slow_or_failing_entry_does_not_hold_back_others(self, client):
        slow = self._SlowBackend(delay=0.01, slow_message="msg-0", slow_delay=0.3)
        slow.fail_when = lambda record: record["message"] == "msg-1"
        self._use(slow)

        resp = client.post("/logs/batch", json={"logs": _entries(6)})

        assert resp.json() == {"success": True, "total": 6, "saved": 5, "failed": 1}
        # every other entry settled while msg-0 was still sleeping
        assert slow.finished[-1] == "msg-0"
        assert len(slow.finished) == 6
