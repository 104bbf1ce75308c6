"""Tests for SyncScheduler cycle ordering, failure isolation and stopping."""

import threading

import pytest

from github_river.fetcher import FetchResult
from github_river.purger import PurgeResult, StaleKindPurger
from github_river.resources import ENDPOINTS, VOLATILE_KINDS, ResourceKind
from github_river.scheduler import CycleResult, SyncScheduler
from github_river.store import BulkResult
from github_river.throttle import RequestThrottle


class FakeFetcher:
    """Records fetch calls into a shared log; optional per-kind failures."""

    def __init__(self, log, written=2, failing=None, crashing=None):
        self.log = log
        self.written = written
        self.failing = failing or set()
        self.crashing = crashing or set()

    async def fetch(self, template, kind, repository):
        self.log.append(("fetch", kind, repository, template))
        if kind in self.crashing:
            raise RuntimeError("boom")
        if kind in self.failing:
            return FetchResult(kind=kind, repository=repository, error="HTTP 502")
        return FetchResult(
            kind=kind,
            repository=repository,
            pages=1,
            documents=self.written,
            writes=BulkResult(written=self.written),
        )


class FakePurger:
    def __init__(self, log, failing=False):
        self.log = log
        self.failing = failing

    async def purge_volatile(self):
        self.log.append(("purge",))
        if self.failing:
            return [PurgeResult(kind=k, error="down") for k in VOLATILE_KINDS]
        return [PurgeResult(kind=k, deleted=1) for k in VOLATILE_KINDS]


def _scheduler(log, recording_sleep, fetcher=None, purger=None, **kwargs):
    return SyncScheduler(
        fetcher=fetcher or FakeFetcher(log),
        purger=purger or FakePurger(log),
        throttle=RequestThrottle(1.0, sleep=recording_sleep),
        repositories=["widgets", "gadgets"],
        interval=0,
        **kwargs,
    )


class TestRunCycle:
    @pytest.mark.asyncio
    async def test_purge_precedes_fetches(self, recording_sleep):
        log = []
        await _scheduler(log, recording_sleep).run_cycle()
        assert log[0] == ("purge",)
        assert all(entry[0] == "fetch" for entry in log[1:])

    @pytest.mark.asyncio
    async def test_repositories_then_endpoints_in_order(self, recording_sleep):
        log = []
        await _scheduler(log, recording_sleep).run_cycle()

        fetches = [(entry[2], entry[3]) for entry in log[1:]]
        expected = [(repo, e.template) for repo in ("widgets", "gadgets") for e in ENDPOINTS]
        assert fetches == expected

    @pytest.mark.asyncio
    async def test_pause_after_every_call(self, recording_sleep):
        log = []
        scheduler = _scheduler(log, recording_sleep)
        await scheduler.run_cycle()
        assert scheduler.throttle.pauses == 2 * len(ENDPOINTS)
        assert recording_sleep.calls == [1.0] * (2 * len(ENDPOINTS))

    @pytest.mark.asyncio
    async def test_result_counts(self, recording_sleep):
        log = []
        result = await _scheduler(log, recording_sleep).run_cycle()

        assert result.fetches == 14
        assert result.pages == 14
        assert result.written == 28
        assert result.purged == len(VOLATILE_KINDS)
        assert result.errors == 0
        assert result.written_by_kind["issue"] == 8

    @pytest.mark.asyncio
    async def test_fetch_failure_does_not_stop_cycle(self, recording_sleep):
        log = []
        fetcher = FakeFetcher(log, failing={ResourceKind.EVENT}, crashing={ResourceKind.LABEL})
        result = await _scheduler(log, recording_sleep, fetcher=fetcher).run_cycle()

        assert len(log) == 1 + 14
        assert result.fetch_errors == 4
        assert result.fetches == 14
        assert any("boom" in detail for detail in result.error_details)
        assert recording_sleep.calls == [1.0] * 14

    @pytest.mark.asyncio
    async def test_purge_failure_does_not_stop_cycle(self, recording_sleep):
        log = []
        purger = FakePurger(log, failing=True)
        result = await _scheduler(log, recording_sleep, purger=purger).run_cycle()
        assert result.purge_failures == len(VOLATILE_KINDS)
        assert result.fetches == 14

    @pytest.mark.asyncio
    async def test_real_purger_drops_stale_volatile_documents(self, store, recording_sleep):
        from github_river.bulk import BulkWriter

        stale = BulkWriter(store, ResourceKind.PULL_REQUEST, "widgets", "acme")
        stale.add({"id": 99, "state": "open"})
        await stale.flush()

        log = []
        scheduler = _scheduler(
            log, recording_sleep, fetcher=FakeFetcher(log), purger=StaleKindPurger(store)
        )
        result = await scheduler.run_cycle()

        assert store.count("pull_request") == 0
        assert result.purged == 1


class TestRunForever:
    @pytest.mark.asyncio
    async def test_stops_after_current_cycle(self, recording_sleep):
        log = []
        stop = threading.Event()
        seen: list[CycleResult] = []

        def on_cycle(result):
            seen.append(result)
            stop.set()

        scheduler = _scheduler(log, recording_sleep, on_cycle_complete=on_cycle)
        await scheduler.run_forever(stop)

        assert len(seen) == 1
        assert seen[0].fetches == 14

    @pytest.mark.asyncio
    async def test_stop_during_cycle_finishes_cycle(self, recording_sleep):
        log = []
        stop = threading.Event()
        seen: list[CycleResult] = []

        class StoppingFetcher(FakeFetcher):
            async def fetch(self, template, kind, repository):
                stop.set()
                return await super().fetch(template, kind, repository)

        scheduler = _scheduler(
            log,
            recording_sleep,
            fetcher=StoppingFetcher(log),
            on_cycle_complete=seen.append,
        )
        await scheduler.run_forever(stop)

        assert len([entry for entry in log if entry[0] == "fetch"]) == 2 * len(ENDPOINTS)
        assert len(seen) == 1
        assert seen[0].fetches == 14

    @pytest.mark.asyncio
    async def test_already_stopped_runs_nothing(self, recording_sleep):
        log = []
        stop = threading.Event()
        stop.set()
        await _scheduler(log, recording_sleep).run_forever(stop)
        assert log == []

    @pytest.mark.asyncio
    async def test_listener_errors_are_contained(self, recording_sleep):
        log = []
        stop = threading.Event()
        calls = []

        def on_cycle(result):
            calls.append(result)
            if len(calls) == 2:
                stop.set()
            raise RuntimeError("listener broke")

        await _scheduler(log, recording_sleep, on_cycle_complete=on_cycle).run_forever(stop)
        assert len(calls) == 2


def test_cycle_result_to_dict():
    result = CycleResult(fetches=3, written=5, duration_seconds=1.234)
    data = result.to_dict()
    assert data["fetches"] == 3
    assert data["written"] == 5
    assert data["duration_seconds"] == 1.23
