"""Export checker state to JSON files."""

import json
import logging
from pathlib import Path

from llm_checker.config import EXPORT_DIR
from llm_checker.records import LogEvent, ModelRecord, StatsSnapshot

logger = logging.getLogger(__name__)


def export_models(
    models: list[ModelRecord],
    output_dir: Path | None = None,
) -> Path:
    """Export the collection to models.json, keeping collection order."""
    if output_dir is None:
        output_dir = EXPORT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    rows = []
    for m in models:
        row = {"id": m.id}
        row.update(m.model_dump(mode="json"))
        rows.append(row)

    path = output_dir / "models.json"
    path.write_text(json.dumps(rows, indent=2))
    logger.info("Exported %d models to %s", len(rows), path)
    return path


def export_stats(stats: StatsSnapshot, output_dir: Path | None = None) -> Path:
    """Export the stats snapshot to stats.json."""
    if output_dir is None:
        output_dir = EXPORT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    path = output_dir / "stats.json"
    path.write_text(json.dumps(stats.model_dump(mode="json"), indent=2) + "\n")
    logger.info("Exported stats to %s", path)
    return path


def export_logs(events: list[LogEvent], output_dir: Path | None = None) -> Path:
    """Export the activity trail to logs.json in emission order."""
    if output_dir is None:
        output_dir = EXPORT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    rows = [event.model_dump(mode="json") for event in events]
    path = output_dir / "logs.json"
    path.write_text(json.dumps(rows, indent=2))
    logger.info("Exported %d log events to %s", len(rows), path)
    return path


def export_all(
    models: list[ModelRecord],
    stats: StatsSnapshot,
    events: list[LogEvent],
    output_dir: Path | None = None,
) -> dict[str, Path]:
    """Export collection, stats and logs."""
    return {
        "models": export_models(models, output_dir),
        "stats": export_stats(stats, output_dir),
        "logs": export_logs(events, output_dir),
    }
