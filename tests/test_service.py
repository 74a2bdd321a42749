"""Tests for the periodic tick service."""

from datetime import datetime, timezone

import pytest

from contentmill.errors import ConfigurationError, RunInProgressError
from contentmill.pipeline import RunResult, RunTrigger, TickService, next_fire, print_run_summary, validate_cron


class StubCoordinator:
    def __init__(self, busy: bool = False) -> None:
        self.busy = busy
        self.ticks = 0

    async def run_tick(self):
        self.ticks += 1
        if self.busy:
            raise RunInProgressError()
        now = datetime(2026, 3, 10, 14, 0, tzinfo=timezone.utc)
        return RunResult(trigger=RunTrigger.SCHEDULED, started_at=now, finished_at=now)


def test_invalid_cron_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        validate_cron("every hour please")


def test_next_fire_is_top_of_next_hour():
    base = datetime(2026, 3, 10, 14, 25, tzinfo=timezone.utc)
    assert next_fire("0 * * * *", base) == datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc)


async def test_serve_sleeps_until_each_fire(sleep):
    coordinator = StubCoordinator()
    clock = lambda: datetime(2026, 3, 10, 14, 45, tzinfo=timezone.utc)
    service = TickService(coordinator, "*/30 * * * *", sleep=sleep, clock=clock)

    await service.serve(max_ticks=2)

    assert coordinator.ticks == 2
    assert sleep.delays == [15 * 60, 15 * 60]


async def test_run_on_start_ticks_immediately(sleep):
    coordinator = StubCoordinator()
    service = TickService(coordinator, run_on_start=True, sleep=sleep)

    await service.serve(max_ticks=1)

    assert coordinator.ticks == 1
    assert sleep.delays == []


async def test_tick_skips_when_run_in_progress(sleep):
    coordinator = StubCoordinator(busy=True)
    service = TickService(coordinator, sleep=sleep)

    await service.tick()

    assert coordinator.ticks == 1


class FlakyCoordinator(StubCoordinator):
    async def run_tick(self):
        if self.ticks == 0:
            self.ticks += 1
            raise RuntimeError("database went away [/red]")
        return await super().run_tick()


async def test_failed_tick_does_not_stop_serving(sleep):
    coordinator = FlakyCoordinator()
    clock = lambda: datetime(2026, 3, 10, 14, 45, tzinfo=timezone.utc)
    service = TickService(coordinator, sleep=sleep, clock=clock)

    await service.serve(max_ticks=2)

    assert coordinator.ticks == 2
    assert len(sleep.delays) == 2


def test_summary_prints_errors_verbatim(capsys):
    now = datetime(2026, 3, 10, 14, 0, tzinfo=timezone.utc)
    result = RunResult(
        trigger=RunTrigger.MANUAL,
        started_at=now,
        finished_at=now,
        errors=["Dev notes [/b]: closing tag"],
    )

    print_run_summary(result)

    assert "Dev notes [/b]: closing tag" in capsys.readouterr().out
