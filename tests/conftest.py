from __future__ import annotations

import pytest

from netmon.core.config import Settings
from netmon.models.probe import Unit
from netmon.services.retry import RetryPolicy
from netmon.services.submission import SubmissionService
from tests.fakes import FakeMetricRepository, FakeProbe, FakeSleep


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        interval_seconds=5.0,
        influx_url="http://influx.test:8086",
        influx_db="internet_metrics",
        influx_username="internetmon",
        influx_password="password123",
        latency_host="example.com",
        download_url="http://probe.test/download",
        upload_url="http://probe.test/upload",
        upload_size_bytes=4096,
        host_tag="test-host",
        shutdown_grace_seconds=0.1,
    )


@pytest.fixture()
def repo() -> FakeMetricRepository:
    return FakeMetricRepository()


@pytest.fixture()
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture()
def submission(repo: FakeMetricRepository, fake_sleep: FakeSleep) -> SubmissionService:
    return SubmissionService(repo=repo, policy=RetryPolicy(), sleep=fake_sleep)


@pytest.fixture()
def probes() -> list[FakeProbe]:
    return [
        FakeProbe("latency", Unit.MILLISECONDS, value=23.4),
        FakeProbe("download", Unit.MEGABITS_PER_SECOND, value=95.2),
        FakeProbe("upload", Unit.MEGABITS_PER_SECOND, value=12.1),
    ]
