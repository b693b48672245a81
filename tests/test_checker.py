"""Tests for the poll orchestrator and collection merge."""

import asyncio
import json
import logging
from collections import Counter
from datetime import date

import pytest

from llm_checker.checker import Checker, merge_models
from llm_checker.errors import ProviderError
from llm_checker.records import LogLevel, LogModule, ModelRecord, Status


class StubProvider:
    """Provider returning fixed items, or raising *error*."""

    name = "stub"
    source = "GET stub://models"

    def __init__(self, items=None, error=None, gate=None):
        self.items = items or []
        self.error = error
        self.gate = gate
        self.calls = 0

    async def discover(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return [dict(item) for item in self.items]


def _item(model_id: str, created: str = "2024-09-25", downloads: int = 0) -> dict:
    return {
        "modelId": model_id,
        "tags": ["text-generation", "license:apache-2.0"],
        "likes": 1,
        "downloads": downloads,
        "createdAt": f"{created}T00:00:00.000Z",
    }


def _record(name: str, released: date, description: str = "", provider: str = "acme") -> ModelRecord:
    return ModelRecord(name=name, provider=provider, description=description, release_date=released)


def _run(checker: Checker):
    return asyncio.run(checker.run_cycle())


def _levels(events) -> Counter:
    return Counter(event.level for event in events)


ITEMS = [
    _item("acme/old-7b", created="2024-01-10", downloads=500),
    _item("acme/new-13b", created="2024-09-01", downloads=25000),
    _item("beta/mid-3b", created="2024-05-05", downloads=10000),
]


# ===================================================================
# merge_models
# ===================================================================


class TestMergeModels:
    def test_discovered_record_replaces_stored(self):
        old = _record("m", date(2024, 1, 1), description="detailed card")
        new = _record("m", date(2024, 1, 1), description="")
        merged = merge_models([old], [new])
        assert merged == [new]

    def test_one_record_per_key(self):
        existing = [_record("a", date(2024, 1, 1)), _record("b", date(2024, 2, 1))]
        discovered = [_record("b", date(2024, 2, 1)), _record("c", date(2024, 3, 1))]
        merged = merge_models(existing, discovered)
        assert sorted(m.id for m in merged) == ["acme/a", "acme/b", "acme/c"]

    def test_same_name_different_provider_are_distinct(self):
        merged = merge_models(
            [_record("m", date(2024, 1, 1), provider="x")],
            [_record("m", date(2024, 1, 1), provider="y")],
        )
        assert len(merged) == 2

    def test_sorted_newest_first(self):
        existing = [_record("a", date(2024, 1, 1)), _record("c", date(2024, 6, 1))]
        discovered = [_record("b", date(2024, 3, 1))]
        merged = merge_models(existing, discovered)
        assert [m.name for m in merged] == ["c", "b", "a"]

    def test_equal_dates_keep_merge_order(self):
        same = date(2024, 5, 5)
        existing = [_record("e1", same), _record("e2", same)]
        discovered = [_record("d1", same), _record("d2", same)]
        merged = merge_models(existing, discovered)
        assert [m.name for m in merged] == ["d1", "d2", "e1", "e2"]

    def test_duplicate_in_batch_last_wins(self):
        first = _record("m", date(2024, 1, 1), description="first")
        second = _record("m", date(2024, 1, 1), description="second")
        merged = merge_models([], [first, second])
        assert [m.description for m in merged] == ["second"]

    def test_inputs_untouched(self):
        existing = [_record("a", date(2024, 1, 1))]
        discovered = [_record("b", date(2024, 2, 1))]
        merge_models(existing, discovered)
        assert [m.name for m in existing] == ["a"]
        assert [m.name for m in discovered] == ["b"]


# ===================================================================
# Successful cycles
# ===================================================================


class TestCycle:
    def test_startup_trail(self):
        checker = Checker(StubProvider(), delay=0)
        events = list(checker.sink)
        assert [e.module for e in events] == [LogModule.SYSTEM, LogModule.DB]
        assert "daemon started" in events[0].message
        assert checker.stats.status == Status.IDLE
        assert checker.stats.current_activity == "System Idle"

    def test_discovers_and_sorts(self):
        checker = Checker(StubProvider(ITEMS), delay=0)
        result = _run(checker)
        assert result.ran
        assert [m.id for m in result.models] == ["acme/new-13b", "beta/mid-3b", "acme/old-7b"]
        assert checker.models == result.models

    def test_stats_after_cycle(self):
        checker = Checker(StubProvider(ITEMS), delay=0)
        stats = _run(checker).stats
        assert stats.status == Status.IDLE
        assert stats.total_models == 3
        assert stats.api_requests == 1
        assert stats.current_activity == "System Idle"
        assert stats.db_size.endswith(" KB")

    def test_log_order(self):
        checker = Checker(StubProvider(ITEMS), delay=0)
        logs = _run(checker).logs
        assert [(e.level, e.module) for e in logs] == [
            (LogLevel.INFO, LogModule.CHECKER),  # poll started
            (LogLevel.INFO, LogModule.API),  # request target
            (LogLevel.INFO, LogModule.CHECKER),  # processing
            (LogLevel.INFO, LogModule.CHECKER),  # discovered count
            (LogLevel.INFO, LogModule.CHECKER),  # popular: new-13b
            (LogLevel.SUCCESS, LogModule.DB),
        ]
        assert logs[3].message == "Discovered 3 new candidates."
        assert logs[-1].message == "Sync complete. Database updated."

    def test_popularity_threshold_is_strict(self):
        checker = Checker(StubProvider(ITEMS), delay=0)
        logs = _run(checker).logs
        popular = [e.message for e in logs if "popular" in e.message]
        assert popular == ["Indexing popular model: new-13b (25000 downloads)"]

    def test_rediscovery_counts_toward_total(self):
        checker = Checker(StubProvider(ITEMS), delay=0)
        _run(checker)
        result = _run(checker)
        assert len(result.models) == 3
        assert result.stats.total_models == 6
        assert result.stats.api_requests == 2

    def test_progress_updates(self):
        snapshots = []
        checker = Checker(StubProvider(ITEMS), delay=0, on_update=snapshots.append)
        _run(checker)
        assert snapshots[0].status == Status.POLLING
        assert snapshots[-1].status == Status.IDLE
        activities = [s.current_activity for s in snapshots]
        assert "Validating: new-13b" in activities
        assert "Updating database..." in activities

    def test_logs_appended_to_sink(self):
        checker = Checker(StubProvider(ITEMS), delay=0)
        before = len(checker.sink)
        result = _run(checker)
        assert len(checker.sink) == before + len(result.logs)
        assert list(checker.sink)[before:] == result.logs


# ===================================================================
# Empty results and failures
# ===================================================================


class TestEmptyAndFailure:
    def test_empty_result(self):
        provider = StubProvider(ITEMS)
        checker = Checker(provider, delay=0)
        before = _run(checker)

        provider.items = []
        result = _run(checker)

        assert result.models == before.models
        counts = _levels(result.logs)
        assert counts[LogLevel.WARN] == 1
        assert counts[LogLevel.SUCCESS] == 1
        assert counts[LogLevel.ERROR] == 0
        assert result.stats.status == Status.IDLE
        assert result.stats.total_models == before.stats.total_models

    def test_provider_failure(self):
        provider = StubProvider(ITEMS)
        checker = Checker(provider, delay=0)
        before = _run(checker)

        provider.error = ProviderError("stub", "HF API Error: 503 Service Unavailable")
        result = _run(checker)

        assert result.ran
        assert result.models == before.models
        assert result.stats.status == Status.ERROR
        assert result.stats.current_activity.startswith("Error:")
        assert result.stats.total_models == before.stats.total_models
        assert result.stats.api_requests == before.stats.api_requests
        counts = _levels(result.logs)
        assert counts[LogLevel.ERROR] == 1
        assert counts[LogLevel.SUCCESS] == 0
        assert "503" in [e for e in result.logs if e.level == LogLevel.ERROR][0].message

    def test_any_exception_is_contained(self):
        checker = Checker(StubProvider(error=RuntimeError("boom")), delay=0)
        result = _run(checker)
        assert result.stats.status == Status.ERROR
        assert checker.models == []

    def test_provider_failure_logs_traceback(self, caplog):
        checker = Checker(StubProvider(error=RuntimeError("boom")), delay=0)
        with caplog.at_level(logging.ERROR, logger="llm_checker.checker"):
            _run(checker)
        records = [r for r in caplog.records if r.name == "llm_checker.checker"]
        assert len(records) == 1
        assert records[0].levelno == logging.ERROR
        assert records[0].exc_info is not None
        assert "Discovery via stub failed" in records[0].getMessage()

    def test_non_list_payload_is_a_failure(self):
        class OddProvider(StubProvider):
            async def discover(self):
                return {"models": []}

        result = _run(Checker(OddProvider(), delay=0))
        assert result.stats.status == Status.ERROR
        assert _levels(result.logs)[LogLevel.ERROR] == 1

    def test_non_finite_counts_do_not_break_cycle(self):
        items = json.loads('[{"modelId": "acme/m-7b", "likes": 1e999, "downloads": 1e999}]')
        checker = Checker(StubProvider(items), delay=0)
        result = _run(checker)
        assert result.stats.status == Status.IDLE
        assert [(m.id, m.likes, m.downloads) for m in result.models] == [("acme/m-7b", 0, 0)]
        assert _levels(result.logs)[LogLevel.ERROR] == 0

    def test_unexpected_failure_ends_in_error(self, monkeypatch):
        def explode(raw, now):
            raise RuntimeError("normalizer crashed")

        monkeypatch.setattr("llm_checker.checker.normalize_candidate", explode)
        checker = Checker(StubProvider(ITEMS), delay=0)
        before = len(checker.sink)

        with pytest.raises(RuntimeError, match="normalizer crashed"):
            _run(checker)

        assert not checker.is_polling
        assert checker.stats.status == Status.ERROR
        assert checker.stats.current_activity == "Error: normalizer crashed"
        assert checker.models == []
        errors = [e for e in checker.sink.since(before) if e.level == LogLevel.ERROR]
        assert len(errors) == 1
        assert errors[0].module == LogModule.CHECKER

    def test_retrigger_recovers(self):
        provider = StubProvider(ITEMS, error=RuntimeError("down"))
        checker = Checker(provider, delay=0)
        _run(checker)
        assert checker.stats.status == Status.ERROR

        provider.error = None
        result = _run(checker)
        assert result.stats.status == Status.IDLE
        assert len(result.models) == 3


# ===================================================================
# Mutual exclusion
# ===================================================================


class TestMutualExclusion:
    def test_trigger_during_cycle_is_noop(self):
        async def scenario():
            gate = asyncio.Event()
            provider = StubProvider(ITEMS, gate=gate)
            checker = Checker(provider, delay=0)

            first = asyncio.create_task(checker.run_cycle())
            await asyncio.sleep(0)  # first cycle now waits inside discover()
            assert checker.is_polling
            assert checker.stats.status == Status.POLLING

            stats_before = checker.stats
            logs_before = len(checker.sink)
            second = await checker.run_cycle()

            assert not second.ran
            assert second.logs == []
            assert second.models == []
            assert checker.stats is stats_before
            assert len(checker.sink) == logs_before
            assert provider.calls == 1

            gate.set()
            done = await first
            assert done.ran
            assert not checker.is_polling
            return done

        result = asyncio.run(scenario())
        assert result.stats.status == Status.IDLE

    def test_guard_released_after_failure(self):
        provider = StubProvider(error=RuntimeError("boom"))
        checker = Checker(provider, delay=0)
        _run(checker)
        assert not checker.is_polling
        _run(checker)
        assert provider.calls == 2


@pytest.mark.parametrize("delay", [0, 0.001])
def test_delay_is_a_suspend_point(delay):
    checker = Checker(StubProvider(ITEMS), delay=delay)
    assert len(_run(checker).models) == 3
