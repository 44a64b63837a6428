# src/routers/logs/helpers.py
import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

# constants for read paging and batch size
DEFAULT_LIMIT = 100
MAX_LIMIT     = 500
MAX_BATCH     = 100
RETENTION     = timedelta(days=30)

REQUIRED_FIELDS_ERROR = "Missing required fields: level, message"
INVALID_BATCH_ERROR   = "Invalid logs array"


# ── Record shape sent to the backend ─────────────────────────────────
class LogRecord(BaseModel):
    # numeric level/message/... from sloppy clients are stored as text
    model_config = ConfigDict(coerce_numbers_to_str=True)

    session_id:  str            = Field("unknown", description="Client session grouping key")
    level:       str            = Field(..., description="Severity tag (required)")
    category:    str            = Field("system")
    message:     str            = Field(..., description="Free-text log body (required)")
    source:      str            = Field("Unknown", description="Origin label")
    meta:        Dict[str, Any] = Field(default_factory=dict)
    stack_trace: Optional[str]  = Field(None, description="Sent only when the client sent it")
    user_agent:  Optional[str]  = None
    url:         Optional[str]  = None
    expires_at:  str            = Field(..., description="Server-stamped retention deadline")


# ── Time helpers ─────────────────────────────────────────────────────
def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a `Z` suffix."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


# ── Body / entry helpers ─────────────────────────────────────────────
def decode_body(raw: Any) -> Any:
    """
    FastAPI hands us parsed JSON for `application/json`, but raw bytes for
    other content types (sendBeacon posts as text/plain). Decode those here;
    malformed JSON raises and ends up as a 500.
    """
    if isinstance(raw, (bytes, bytearray)):
        text = raw.decode("utf-8")
        return json.loads(text) if text.strip() else None
    return raw


def missing_required(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return True
    return not entry.get("level") or not entry.get("message")


def meta_too_large(entry: Mapping[str, Any], limit: int) -> bool:
    if limit <= 0 or not entry.get("meta"):
        return False
    size = len(json.dumps(entry["meta"], separators=(",", ":"), default=str).encode("utf-8"))
    return size > limit


def build_record(entry: Mapping[str, Any], headers: Mapping[str, str],
                 now: Optional[datetime] = None) -> dict:
    """
    Apply defaults and stamp `expires_at`; any client-sent expiry is ignored.
    An absent `stack_trace` stays absent so the column default applies,
    an explicit null is forwarded. Raises pydantic.ValidationError when a
    field has the wrong shape (e.g. `meta` not an object).
    """
    now = now or datetime.now(timezone.utc)
    fields = dict(
        session_id=entry.get("session_id") or "unknown",
        level=entry.get("level"),
        category=entry.get("category") or "system",
        message=entry.get("message"),
        source=entry.get("source") or "Unknown",
        meta=entry.get("meta") or {},
        user_agent=entry.get("user_agent") or headers.get("user-agent"),
        url=entry.get("url") or headers.get("referer"),
        expires_at=to_iso(now + RETENTION),
    )
    if "stack_trace" in entry:
        fields["stack_trace"] = entry["stack_trace"]
    return LogRecord(**fields).model_dump(exclude_unset=True)


# ── Query-string helpers ─────────────────────────────────────────────
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _to_int(raw: Optional[str]) -> Optional[int]:
    """Leading integer of *raw* ("10abc" -> 10, "50.5" -> 50), else None."""
    if raw is None:
        return None
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


def parse_limit(raw: Optional[str]) -> int:
    value = _to_int(raw)
    if not value or value < 0:
        return DEFAULT_LIMIT
    return min(value, MAX_LIMIT)


def parse_offset(raw: Optional[str]) -> int:
    value = _to_int(raw)
    if value is None or value < 0:
        return 0
    return value
