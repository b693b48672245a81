"""Stats projection: previous snapshot + discovered batch → next snapshot."""

import json
from datetime import datetime

from llm_checker.records import ModelRecord, StatsSnapshot, Status, utcnow

IDLE_ACTIVITY = "System Idle"

# The size figure is illustrative, not storage accounting: the serialized
# batch length scaled by a fixed factor, as the dashboard has always shown it.
SIZE_SCALE = 5


def estimate_db_size(batch: list[ModelRecord]) -> str:
    """Return a display size such as ``"3.42 KB"`` for a discovered batch."""
    serialized = json.dumps([record.model_dump(mode="json") for record in batch])
    return f"{len(serialized) * SIZE_SCALE / 1024:.2f} KB"


def project_stats(
    previous: StatsSnapshot,
    batch: list[ModelRecord],
    now: datetime | None = None,
) -> StatsSnapshot:
    """Snapshot after a completed cycle.

    The running total grows by the batch size, re-discovered duplicates
    included.  Only the batch is looked at, never the merged collection.
    """
    if now is None:
        now = utcnow()
    return previous.model_copy(
        update={
            "total_models": previous.total_models + len(batch),
            "last_check": now,
            "status": Status.IDLE,
            "db_size": estimate_db_size(batch),
            "api_requests": previous.api_requests + 1,
            "current_activity": IDLE_ACTIVITY,
        }
    )
