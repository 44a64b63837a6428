# ── src/routers/logs/__init__.py ─────────────────────────────────────
"""
Console-log relay sub-router.

    GET  /logs          → proxied, paginated read (newest first)
    POST /logs          → one entry, returns the created row
    POST /logs/batch    → up to 100 entries inserted concurrently

Rows are written to the Supabase table named by LOG_TABLE with a
server-side `expires_at` of now + 30 days; purging is done by the backend.
"""
from .endpoints import router  # re-export for `include_router`
