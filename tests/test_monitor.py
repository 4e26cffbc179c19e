from __future__ import annotations

import asyncio
import logging
import time

import pytest

from netmon.core.errors import TransferError, Unreachable
from netmon.models.probe import ProbeFailure, ProbeSuccess, Unit
from netmon.probes.latency import CommandResult, LatencyProbe
from netmon.services.monitor import MonitorService
from netmon.services.submission import SubmissionService
from tests.fakes import FakeMetricRepository, FakeProbe


@pytest.mark.asyncio
async def test_all_probes_succeed(
    probes: list[FakeProbe], submission: SubmissionService, repo: FakeMetricRepository
) -> None:
    monitor = MonitorService(probes=probes, submission=submission, tags={"host": "h"})
    result = await monitor.tick(1)

    assert result.submitted is True
    assert result.failed == []
    assert len(repo.batches) == 1
    batch = repo.batches[0]
    assert batch.tick == 1
    assert {p.measurement for p in batch} == {"latency", "download", "upload"}
    assert all(p.tags["host"] == "h" for p in batch)


@pytest.mark.asyncio
async def test_timed_out_download_is_absent_not_zero(
    submission: SubmissionService, repo: FakeMetricRepository
) -> None:
    probes = [
        FakeProbe("latency", Unit.MILLISECONDS, value=23.4),
        FakeProbe("download", Unit.MEGABITS_PER_SECOND, delay=5.0, timeout_seconds=0.05),
        FakeProbe("upload", Unit.MEGABITS_PER_SECOND, value=12.1),
    ]
    monitor = MonitorService(probes=probes, submission=submission, tags={"host": "h"})

    result = await monitor.tick(1)

    batch = repo.batches[0]
    assert len(batch) == 2
    by_name = {p.measurement: p for p in batch}
    assert by_name["latency"].value == 23.4
    assert by_name["latency"].tags["unit"] == "ms"
    assert by_name["upload"].value == 12.1
    assert by_name["upload"].tags["unit"] == "mbps"
    assert "download" not in by_name
    assert result.failed == ["download"]


@pytest.mark.asyncio
async def test_slow_probe_does_not_hold_back_the_others(
    submission: SubmissionService,
) -> None:
    probes = [
        FakeProbe("latency", value=1.0, delay=0.01),
        FakeProbe("download", delay=10.0, timeout_seconds=0.1),
    ]
    monitor = MonitorService(probes=probes, submission=submission)

    started = time.monotonic()
    results, batch = await monitor.collect(1)

    assert time.monotonic() - started < 2.0
    assert [r.probe for r in results] == ["latency", "download"]
    assert [p.measurement for p in batch] == ["latency"]


@pytest.mark.asyncio
async def test_probe_errors_become_failures(
    submission: SubmissionService, caplog: pytest.LogCaptureFixture
) -> None:
    probes = [
        FakeProbe("latency", error=Unreachable("no reply from google.com")),
        FakeProbe("download", error=TransferError("download returned HTTP 503")),
        FakeProbe("upload", error=RuntimeError("boom")),
    ]
    monitor = MonitorService(probes=probes, submission=submission)

    with caplog.at_level(logging.WARNING, logger="netmon.services.monitor"):
        results, batch = await monitor.collect(4)

    assert batch.is_empty
    assert all(isinstance(r, ProbeFailure) for r in results)
    reasons = {r.probe: r.reason for r in results if isinstance(r, ProbeFailure)}
    assert reasons["latency"].startswith("Unreachable")
    assert "503" in reasons["download"]
    assert "boom" in reasons["upload"]
    assert any("Failed to measure latency" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_points_are_stamped_at_completion_in_completion_order(
    submission: SubmissionService,
) -> None:
    clock = iter(range(100, 200))
    probes = [
        FakeProbe("latency", value=1.0, delay=0.05),
        FakeProbe("upload", Unit.MEGABITS_PER_SECOND, value=2.0, delay=0.0),
    ]
    monitor = MonitorService(probes=probes, submission=submission, now_ns=lambda: next(clock))

    results, batch = await monitor.collect(1)

    assert [p.measurement for p in batch] == ["upload", "latency"]
    assert [p.timestamp_ns for p in batch] == [100, 101]
    assert all(isinstance(r, ProbeSuccess) for r in results)


@pytest.mark.asyncio
async def test_cancelled_tick_cancels_in_flight_probes(submission: SubmissionService) -> None:
    slow = FakeProbe("download", delay=10.0, timeout_seconds=20.0)
    monitor = MonitorService(probes=[slow], submission=submission)

    task = asyncio.create_task(monitor.tick(1))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert slow.in_flight == 0


@pytest.mark.asyncio
async def test_silent_host_is_reported_as_unreachable(submission: SubmissionService) -> None:
    async def silent_ping(argv: list[str], timeout_seconds: float) -> CommandResult:
        await asyncio.wait_for(asyncio.sleep(10.0), timeout=timeout_seconds)
        raise AssertionError("ping should have timed out")

    latency = LatencyProbe(
        host="10.255.255.1", timeout_seconds=0.05, ping_binary="ping", runner=silent_ping
    )
    monitor = MonitorService(probes=[latency], submission=submission)

    results, batch = await monitor.collect(1)

    assert batch.is_empty
    [failure] = results
    assert isinstance(failure, ProbeFailure)
    assert failure.reason.startswith("Unreachable")
    assert "10.255.255.1" in failure.reason
