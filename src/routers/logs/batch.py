# ── src/routers/logs/batch.py ────────────────────────────────────────
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from .helpers import MAX_BATCH, build_record, meta_too_large, missing_required

_logger = logging.getLogger(__name__)


class EntryRejected(Exception):
    """A batch entry that fails validation and is never sent."""


def _insert_one(backend, entry: Any, headers: Mapping[str, str],
                now: datetime, max_meta_bytes: int) -> None:
    if missing_required(entry):
        raise EntryRejected("missing level or message")
    if meta_too_large(entry, max_meta_bytes):
        raise EntryRejected(f"meta exceeds {max_meta_bytes} bytes")
    backend.insert(build_record(entry, headers, now), returning=False)


def handle_batch(logs: List[Any], headers: Mapping[str, str], backend,
                 max_workers: int = 16, max_meta_bytes: int = 0) -> Dict[str, Any]:
    """
    Insert up to MAX_BATCH entries concurrently and tally the outcomes.

    • Entries past MAX_BATCH are dropped, not counted.
    • Every entry settles on its own; one failure never cancels the rest.
    • No retries – callers read `saved` / `failed` to spot partial loss.
    """
    entries = logs[:MAX_BATCH]
    now     = datetime.now(timezone.utc)
    saved   = 0
    failed  = 0

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(entries)))) as executor:
        futures = {
            executor.submit(_insert_one, backend, entry, headers, now, max_meta_bytes): idx
            for idx, entry in enumerate(entries)
        }
        for future in as_completed(futures):
            try:
                future.result()
                saved += 1
            except Exception as exc:  # noqa: BLE001
                failed += 1
                _logger.warning("Batch entry %s failed: %s", futures[future], exc)

    _logger.info("Batch settled – total=%s saved=%s failed=%s", len(entries), saved, failed)
    return {
        "success": True,
        "total":   len(entries),
        "saved":   saved,
        "failed":  failed,
    }
