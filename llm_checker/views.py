"""Text views over the checker state: dashboard, model table, log feed.

Read-only.  Nothing here touches the collection or the stats except to
format them.
"""

import re

from llm_checker.records import LogEvent, ModelRecord, StatsSnapshot
from llm_checker.sources.normalizer import MOE_VRAM_LABEL, UNKNOWN

CHART_WIDTH = 40
TOP_N = 5

VRAM_TIERS = ("low", "medium", "high")
SIZE_TIERS = ("small", "medium", "large")

_LEADING_NUMBER = re.compile(r"^\d+(?:\.\d+)?")


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def _leading_number(label: str) -> float | None:
    match = _LEADING_NUMBER.match(label)
    return float(match.group(0)) if match else None


def vram_tier(vram_size: str) -> str | None:
    """Bucket a VRAM label: low ≤ 8GB, medium ≤ 24GB, high otherwise."""
    if vram_size == MOE_VRAM_LABEL:
        return "high"
    gb = _leading_number(vram_size)
    if gb is None:
        return None
    if gb <= 8:
        return "low"
    if gb <= 24:
        return "medium"
    return "high"


def size_tier(parameters: str) -> str | None:
    """Bucket a parameter label: small < 8B, medium < 30B, large otherwise."""
    if parameters == UNKNOWN:
        return None
    if "X" in parameters.upper():
        return "large"
    billions = _leading_number(parameters)
    if billions is None:
        return None
    if billions < 8:
        return "small"
    if billions < 30:
        return "medium"
    return "large"


def filter_models(
    models: list[ModelRecord],
    search: str = "",
    license: str = "all",
    vram: str = "all",
    size: str = "all",
) -> list[ModelRecord]:
    """Apply the model-table filters, keeping collection order."""
    needle = search.lower()
    result = []
    for m in models:
        if needle and needle not in m.name.lower() and needle not in m.provider.lower():
            continue
        if license != "all" and m.license != license:
            continue
        if vram != "all" and vram_tier(m.vram_size) != vram:
            continue
        if size != "all" and size_tier(m.parameters) != size:
            continue
        result.append(m)
    return result


# ---------------------------------------------------------------------------
# REST-shaped payload
# ---------------------------------------------------------------------------


def models_page(models: list[ModelRecord], page: int = 1, limit: int = 10) -> dict:
    """Body of ``GET /api/v1/models?page=&limit=`` for the given collection."""
    page = max(page, 1)
    limit = max(limit, 1)
    start = (page - 1) * limit
    data = []
    for m in models[start:start + limit]:
        row = m.model_dump(mode="json")
        row["id"] = m.id
        data.append(row)
    return {"data": data, "meta": {"total": len(models), "page": page, "limit": limit}}


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def render_dashboard(stats: StatsSnapshot, models: list[ModelRecord]) -> str:
    lines = [
        "System Overview",
        "",
        f"  Total Models  {stats.total_models}",
        f"  DB Size       {stats.db_size}",
        f"  API Requests  {stats.api_requests:,}",
        f"  Last Sync     {stats.last_check:%H:%M:%S}",
        f"  Status        {stats.status.value} ({stats.current_activity})",
        "",
        "Top Models by Downloads",
    ]

    top = sorted(models, key=lambda m: m.downloads, reverse=True)[:TOP_N]
    peak = max((m.downloads for m in top), default=0)
    if not top:
        lines.append("  (no data)")
    for m in top:
        bar = "#" * (round(m.downloads / peak * CHART_WIDTH) if peak else 0)
        lines.append(f"  {_truncate(m.name, 18):<18} {bar} {m.downloads / 1000:.0f}k")

    lines += ["", "Latest Discoveries"]
    if not models:
        lines.append("  Waiting for polling cycle...")
    for m in models[:TOP_N]:
        lines.append(f"  {m.id}  {m.parameters} • {m.likes} likes")
    return "\n".join(lines)


def render_models(models: list[ModelRecord], total: int | None = None) -> str:
    if total is None:
        total = len(models)
    header = f"{'MODEL':<48} {'PARAMS':>7} {'VRAM':>13} {'LICENSE':<12} {'DOWNLOADS':>10} RELEASED"
    lines = [f"Model Database ({len(models)} / {total} visible)", header, "-" * len(header)]
    if not models:
        lines.append("No models match the current filters.")
    for m in models:
        lines.append(
            f"{_truncate(m.id, 48):<48} {m.parameters:>7} {m.vram_size:>13} "
            f"{_truncate(m.license, 12):<12} {m.downloads:>10} {m.release_date.isoformat()}"
        )
    return "\n".join(lines)


def render_logs(events: list[LogEvent]) -> str:
    lines = []
    for event in events:
        lines.append(
            f"[{event.timestamp:%H:%M:%S}] {event.level.value:<7} "
            f"{event.module.value:<7} {event.message}"
        )
    return "\n".join(lines)
