# ── src/routers/logs/endpoints.py ────────────────────────────────────
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request
from pydantic import ValidationError

from response_utils import error_response, json_response
from settings import Settings, get_settings

from .backend import SupabaseClient, get_backend
from .batch import handle_batch
from .helpers import (
    INVALID_BATCH_ERROR,
    REQUIRED_FIELDS_ERROR,
    build_record,
    decode_body,
    meta_too_large,
    missing_required,
    parse_limit,
    parse_offset,
)

_logger = logging.getLogger(__name__)

router = APIRouter()


# ── Read ─────────────────────────────────────────────────────────────
@router.get("/logs", summary="List stored console logs, newest first")
def list_logs(
    session: Optional[str] = None,
    limit:   Optional[str] = None,
    offset:  Optional[str] = None,
    backend: SupabaseClient = Depends(get_backend),
):
    rows = backend.select(parse_limit(limit), parse_offset(offset), session or None)
    return json_response(rows)


# ── Single write ─────────────────────────────────────────────────────
@router.post("/logs", summary="Store one console log entry")
def create_log(
    request: Request,
    payload: Any = Body(None),
    backend: SupabaseClient = Depends(get_backend),
    settings: Settings = Depends(get_settings),
):
    entry = decode_body(payload)
    if missing_required(entry):
        return error_response(REQUIRED_FIELDS_ERROR, 400)
    if meta_too_large(entry, settings.max_meta_bytes):
        return error_response(f"meta exceeds {settings.max_meta_bytes} bytes", 400)

    try:
        record = build_record(entry, request.headers)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or "entry"
        return error_response(f"Invalid field {field}: {first.get('msg')}", 400)

    rows = backend.insert(record, returning=True)
    _logger.info("Stored %s log for session %s",
                 entry.get("level"), entry.get("session_id") or "unknown")
    return json_response({"success": True, "data": rows[0] if rows else None}, 201)


# ── Batch write ──────────────────────────────────────────────────────
@router.post("/logs/batch", summary="Store up to 100 console log entries")
def create_logs_batch(
    request: Request,
    payload: Any = Body(None),
    backend: SupabaseClient = Depends(get_backend),
    settings: Settings = Depends(get_settings),
):
    body = decode_body(payload)
    logs = body.get("logs") if isinstance(body, dict) else None
    if not isinstance(logs, list) or not logs:
        return error_response(INVALID_BATCH_ERROR, 400)

    result = handle_batch(
        logs,
        request.headers,
        backend,
        max_workers=settings.batch_workers,
        max_meta_bytes=settings.max_meta_bytes,
    )
    return json_response(result, 201)
