# ── src/routers/logs/backend.py ──────────────────────────────────────
"""
Thin client for the Supabase (PostgREST) table that stores console logs.

Only two calls are ever made:
    select()  → GET  /rest/v1/<table>?select=*&order=created_at.desc…
    insert()  → POST /rest/v1/<table>   (Prefer: return=representation|minimal)

Any non-2xx answer raises BackendError; network errors from `requests`
propagate unchanged.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from fastapi import Depends

from settings import Settings, get_settings

_logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised when the backend answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body        = body


class SupabaseClient:
    def __init__(self, settings: Settings):
        self._settings = settings

    # ── internals ---------------------------------------------------------
    def _table_url(self) -> str:
        if not self._settings.supabase_url:
            raise BackendError("SUPABASE_URL is not configured")
        return f"{self._settings.supabase_url}/rest/v1/{self._settings.table}"

    def _auth_headers(self) -> Dict[str, str]:
        key = self._settings.supabase_key
        return {
            "apikey":        key,
            "Authorization": f"Bearer {key}",
        }

    # ── public API --------------------------------------------------------
    def select(self, limit: int, offset: int = 0, session: Optional[str] = None) -> List[Any]:
        query = (
            f"{self._table_url()}?select=*&order=created_at.desc"
            f"&limit={limit}&offset={offset}"
        )
        if session:
            query += f"&session_id=eq.{quote(session, safe='')}"

        headers = {**self._auth_headers(), "Accept": "application/json"}
        resp = requests.get(query, headers=headers, timeout=self._settings.http_timeout)
        if not resp.ok:
            _logger.warning("Backend read failed – status=%s", resp.status_code)
            raise BackendError(f"Supabase error: {resp.status_code}",
                               status_code=resp.status_code, body=resp.text)
        return resp.json()

    def insert(self, record: Dict[str, Any], returning: bool = True) -> Optional[List[Any]]:
        headers = {
            **self._auth_headers(),
            "Content-Type": "application/json",
            "Prefer":       "return=representation" if returning else "return=minimal",
        }
        resp = requests.post(self._table_url(), json=record, headers=headers,
                             timeout=self._settings.http_timeout)
        if not resp.ok:
            text = resp.text or ""
            raise BackendError(f"Supabase insert error: {resp.status_code} {text}".rstrip(),
                               status_code=resp.status_code, body=text)
        return resp.json() if returning else None


def get_backend(settings: Settings = Depends(get_settings)) -> SupabaseClient:
    return SupabaseClient(settings)
