"""Poll orchestrator: discover → normalize → merge → restat → log."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from llm_checker.config import POPULARITY_THRESHOLD, VALIDATION_DELAY, VERSION
from llm_checker.errors import ProviderError
from llm_checker.records import (
    LogEvent,
    LogLevel,
    LogModule,
    ModelRecord,
    StatsSnapshot,
    Status,
    utcnow,
)
from llm_checker.sink import LogSink
from llm_checker.sources.base import DiscoveryProvider
from llm_checker.sources.normalizer import normalize_candidate
from llm_checker.stats import project_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleResult:
    """State after a cycle and the log events it emitted.

    *ran* is False when the trigger was ignored because a cycle was
    already in flight.
    """

    models: list[ModelRecord]
    stats: StatsSnapshot
    logs: list[LogEvent]
    ran: bool = True


def merge_models(existing: list[ModelRecord], discovered: list[ModelRecord]) -> list[ModelRecord]:
    """Union two collections by identity key, newest release first.

    On a key collision the discovered record replaces the stored one
    unconditionally (latest wins, no field-level merge).  Discovered records
    come before stored ones in merge order, and the release-date sort is
    stable, so equal dates keep that order.
    """
    merged: dict[str, ModelRecord] = {}
    for record in discovered:
        merged[record.id] = record
    for record in existing:
        if record.id not in merged:
            merged[record.id] = record
    return sorted(merged.values(), key=lambda r: r.release_date, reverse=True)


class Checker:
    """Owns the model collection, the stats snapshot and the log sink.

    Only :meth:`run_cycle` mutates them.  Readers (the views, the exporter)
    use the ``models``, ``stats`` and ``sink`` attributes.

    Args:
        provider: Where candidates come from.
        delay: Pause in seconds while "validating" each discovered record.
        popularity_threshold: Downloads above which a record gets logged as
            a notable find.
        on_update: Called with every new stats snapshot, including the
            progress updates made mid-cycle.
    """

    def __init__(
        self,
        provider: DiscoveryProvider,
        delay: float = VALIDATION_DELAY,
        popularity_threshold: int = POPULARITY_THRESHOLD,
        on_update: Callable[[StatsSnapshot], None] | None = None,
    ) -> None:
        self.provider = provider
        self.delay = delay
        self.popularity_threshold = popularity_threshold
        self.on_update = on_update
        self.models: list[ModelRecord] = []
        self.stats = StatsSnapshot()
        self.sink = LogSink()
        self._polling = False

        self.sink.append(LogLevel.INFO, LogModule.SYSTEM, f"llm-checker daemon started v{VERSION}")
        self.sink.append(LogLevel.INFO, LogModule.DB, "Connected to in-memory model store")

    @property
    def is_polling(self) -> bool:
        return self._polling

    def _set_stats(self, **update) -> None:
        self.stats = self.stats.model_copy(update=update)
        if self.on_update is not None:
            self.on_update(self.stats)

    async def run_cycle(self) -> CycleResult:
        """Run one discovery cycle.

        A trigger that arrives while a cycle is in flight is a no-op: it
        returns the current state with no log events.  Provider failures are
        recorded as an ERROR event and ERROR status, never raised.  Any other
        failure also ends in ERROR status, then propagates.
        """
        if self._polling:
            logger.debug("Cycle already in flight, ignoring trigger")
            return CycleResult(list(self.models), self.stats, [], ran=False)

        self._polling = True
        start = len(self.sink)
        try:
            await self._cycle()
        except Exception as e:
            self.sink.append(LogLevel.ERROR, LogModule.CHECKER, f"Cycle aborted: {e}")
            self._set_stats(status=Status.ERROR, current_activity=f"Error: {e}")
            raise
        finally:
            self._polling = False
        return CycleResult(list(self.models), self.stats, self.sink.since(start))

    async def _cycle(self) -> None:
        provider = self.provider
        self._set_stats(status=Status.POLLING, current_activity=f"Connecting to {provider.name}...")
        self.sink.append(LogLevel.INFO, LogModule.CHECKER, f"Starting scheduled poll of {provider.name}...")
        self.sink.append(LogLevel.INFO, LogModule.API, provider.source)

        # 1. Discover. Any failure here ends the cycle before state changes.
        try:
            candidates = await provider.discover()
            if not isinstance(candidates, list):
                raise ProviderError(provider.name, f"Expected a list, got {type(candidates).__name__}")
        except Exception as e:
            logger.exception("Discovery via %s failed", provider.name)
            self.sink.append(LogLevel.ERROR, LogModule.CHECKER, f"Failed to fetch models: {e}")
            self._set_stats(status=Status.ERROR, current_activity=f"Error: {e}")
            return

        self._set_stats(current_activity="Parsing model metadata...")
        self.sink.append(LogLevel.INFO, LogModule.CHECKER, "Processing response stream...")
        if not candidates:
            self.sink.append(LogLevel.WARN, LogModule.CHECKER, "No new models found or API rate limited.")
        else:
            self.sink.append(
                LogLevel.INFO, LogModule.CHECKER, f"Discovered {len(candidates)} new candidates."
            )

        # 2. Normalize
        now = utcnow()
        discovered = [normalize_candidate(raw, now) for raw in candidates]

        # 3. Validate, one suspend point per record
        for record in discovered:
            self._set_stats(current_activity=f"Validating: {record.name}")
            await asyncio.sleep(self.delay)
            if record.downloads > self.popularity_threshold:
                self.sink.append(
                    LogLevel.INFO,
                    LogModule.CHECKER,
                    f"Indexing popular model: {record.name} ({record.downloads} downloads)",
                )

        # 4. Merge
        self._set_stats(current_activity="Updating database...")
        self.models = merge_models(self.models, discovered)
        self.sink.append(LogLevel.SUCCESS, LogModule.DB, "Sync complete. Database updated.")

        # 5. Restat
        self.stats = project_stats(self.stats, discovered)
        if self.on_update is not None:
            self.on_update(self.stats)
        logger.info(
            "Cycle complete: %d discovered, %d stored, %d total seen",
            len(discovered),
            len(self.models),
            self.stats.total_models,
        )
