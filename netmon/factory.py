from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx

from netmon.clients.http import create_probe_client
from netmon.core.config import Settings
from netmon.core.errors import SubmissionError
from netmon.db.influx import create_influx_client
from netmon.probes.download import DownloadProbe
from netmon.probes.latency import LatencyProbe
from netmon.probes.upload import UploadProbe
from netmon.repositories.influx import InfluxLineProtocolRepository
from netmon.services.monitor import MonitorService
from netmon.services.retry import RetryPolicy
from netmon.services.scheduler import Scheduler
from netmon.services.submission import SubmissionService

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    settings: Settings
    repo: InfluxLineProtocolRepository
    monitor: MonitorService
    scheduler: Scheduler


@asynccontextmanager
async def create_runtime(
    settings: Settings,
    *,
    probe_transport: httpx.AsyncBaseTransport | None = None,
    store_transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[Runtime]:
    """Wire every component from the settings and close the HTTP clients on exit."""
    probe_client = create_probe_client(
        timeout_seconds=max(settings.download_timeout_seconds, settings.upload_timeout_seconds),
        transport=probe_transport,
    )
    influx_client = create_influx_client(settings, transport=store_transport)
    try:
        repo = InfluxLineProtocolRepository(client=influx_client, database=settings.influx_db)
        submission = SubmissionService(repo=repo, policy=RetryPolicy.from_settings(settings))
        probes = [
            LatencyProbe(
                host=settings.latency_host,
                count=settings.latency_count,
                timeout_seconds=settings.latency_timeout_seconds,
            ),
            DownloadProbe(
                client=probe_client,
                url=str(settings.download_url),
                timeout_seconds=settings.download_timeout_seconds,
            ),
            UploadProbe(
                client=probe_client,
                url=str(settings.upload_url),
                size_bytes=settings.upload_size_bytes,
                timeout_seconds=settings.upload_timeout_seconds,
            ),
        ]
        monitor = MonitorService(
            probes=probes, submission=submission, tags={"host": settings.host_tag}
        )
        scheduler = Scheduler(
            monitor=monitor,
            interval_seconds=settings.interval_seconds,
            shutdown_grace_seconds=settings.shutdown_grace_seconds,
        )
        yield Runtime(settings=settings, repo=repo, monitor=monitor, scheduler=scheduler)
    finally:
        await probe_client.aclose()
        await influx_client.aclose()


def install_signal_handlers(scheduler: Scheduler) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on every platform (e.g. Windows event loops).
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, scheduler.stop)


async def run_monitor(settings: Settings, *, max_ticks: int | None = None) -> int:
    logger.info(
        "Starting internet-monitor with interval of %g seconds", settings.interval_seconds
    )
    async with create_runtime(settings) as runtime:
        # Before the store ping, which may block for the whole store timeout.
        install_signal_handlers(runtime.scheduler)
        try:
            await runtime.repo.ping()
        except SubmissionError as e:
            logger.warning("Could not ping the store, but will try to write anyway: %s", e)
        else:
            logger.info("Successfully connected to the store at %s", settings.influx_url)

        return await runtime.scheduler.run(max_ticks=max_ticks)
