"""Turn raw listing items into canonical ``ModelRecord`` objects.

Pure computation, no I/O.  Unlike the providers, nothing here raises:
unreadable fields degrade to sentinel values ("Unknown", "other", 0, today)
so a single odd listing item never fails a whole discovery cycle.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import Decimal

from llm_checker.records import ModelRecord, utcnow

UNKNOWN = "Unknown"
DEFAULT_LICENSE = "other"
LICENSE_PREFIX = "license:"

# All mixture-of-experts labels share one bucket; the 8x7B-style label says
# nothing reliable about how many experts are resident at once.
MOE_VRAM_LABEL = "High (>48GB)"

# FP16 weights (2 bytes/param) plus a flat 20% for activations and KV cache
BYTES_PER_PARAM = Decimal(2)
VRAM_OVERHEAD = Decimal("1.2")

# 7B, 7.2b, 70B, 8x7B, 8x22b
_PARAM_RE = re.compile(r"\d+(?:\.\d+)?(?:x\d+(?:\.\d+)?)?b", re.IGNORECASE)
_MAGNITUDE_RE = re.compile(r"^\d+(?:\.\d+)?")


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------


def extract_params(name: str, tags: list[str] | None) -> str:
    """Extract a parameter-count label from the model name, then its tags.

    First match wins and is upper-cased, e.g. ``"Llama-2-7b-chat"`` → ``"7B"``.
    Returns ``"Unknown"`` when neither source carries a size.
    """
    match = _PARAM_RE.search(name or "")
    if match:
        return match.group(0).upper()

    for tag in tags or []:
        match = _PARAM_RE.search(tag)
        if match:
            return match.group(0).upper()

    return UNKNOWN


def extract_license(tags: list[str] | None) -> str:
    """Return the value of the first ``license:`` tag, or ``"other"``."""
    for tag in tags or []:
        if tag.startswith(LICENSE_PREFIX):
            return tag[len(LICENSE_PREFIX):]
    return DEFAULT_LICENSE


def estimate_vram(params: str) -> str:
    """Estimate inference VRAM for a parameter label.

    ``"7B"`` → ``"17GB"`` (ceil(7 × 2 × 1.2)).  MoE labels (``"8X7B"``) map to
    a fixed high-tier bucket.  Decimal arithmetic keeps round sizes exact
    (5B → 12GB, not 13GB from a float rounding artefact).
    """
    if params == UNKNOWN:
        return UNKNOWN
    if "X" in params.upper():
        return MOE_VRAM_LABEL

    match = _MAGNITUDE_RE.match(params)
    if not match:
        return UNKNOWN

    estimated_gb = math.ceil(Decimal(match.group(0)) * BYTES_PER_PARAM * VRAM_OVERHEAD)
    return f"{estimated_gb}GB"


def normalize_release_date(created_at: str | None, now: datetime | None = None) -> date:
    """Truncate an ISO-8601 creation timestamp to its date.

    Missing or unparseable values fall back to the date of *now*.
    """
    if now is None:
        now = utcnow()
    if isinstance(created_at, str) and created_at:
        try:
            return date.fromisoformat(created_at.split("T", 1)[0])
        except ValueError:
            pass
    return now.date()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def split_model_id(model_id: str) -> tuple[str, str]:
    """Split ``"provider/name"`` at the first slash.

    Ids without an owner segment get provider ``"Unknown"``.
    """
    provider, sep, name = model_id.partition("/")
    if not sep or not provider or not name:
        return UNKNOWN, model_id or UNKNOWN
    return provider, name


def _count(value) -> int:
    """Coerce a likes/downloads value to a non-negative int."""
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _tags(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(tag) for tag in value]


def _description(raw: dict) -> str:
    """Top-level description, then model card, then a task placeholder."""
    if isinstance(raw.get("description"), str) and raw["description"]:
        return raw["description"]
    card = raw.get("cardData")
    if isinstance(card, dict) and isinstance(card.get("description"), str) and card["description"]:
        return card["description"]
    task = raw.get("pipeline_tag") or "text-generation"
    return f"Auto-discovered model. Task: {task}."


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def normalize_candidate(raw: dict, now: datetime | None = None) -> ModelRecord:
    """Build a ``ModelRecord`` from one listing item.

    *raw* uses the Hugging Face listing shape (``modelId``, ``tags``,
    ``likes``, ``downloads``, ``cardData``, ``createdAt``, ``pipeline_tag``).
    ``last_updated`` is stamped with *now*, not with any provider time.
    """
    if now is None:
        now = utcnow()
    if not isinstance(raw, dict):
        raw = {}

    model_id = str(raw.get("modelId") or raw.get("id") or "")
    provider, name = split_model_id(model_id)
    tags = _tags(raw.get("tags"))
    params = extract_params(name, tags)

    return ModelRecord(
        name=name,
        provider=provider,
        parameters=params,
        description=_description(raw),
        likes=_count(raw.get("likes")),
        downloads=_count(raw.get("downloads")),
        tags=tags,
        license=extract_license(tags),
        vram_size=estimate_vram(params),
        release_date=normalize_release_date(raw.get("createdAt"), now),
        last_updated=now,
    )
