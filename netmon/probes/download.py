from __future__ import annotations

import time
from typing import Callable

import httpx

from netmon.core.errors import TransferError
from netmon.models.probe import Unit
from netmon.probes.base import throughput_mbps


class DownloadProbe:
    name = "download"
    unit = Unit.MEGABITS_PER_SECOND

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        url: str,
        timeout_seconds: float = 30.0,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._client = client
        self._url = url
        self.timeout_seconds = timeout_seconds
        self._clock = clock

    async def measure(self) -> float:
        received = 0
        started = self._clock()
        try:
            async with self._client.stream(
                "GET",
                self._url,
                timeout=self.timeout_seconds,
                headers={"Accept-Encoding": "identity"},
            ) as resp:
                if not resp.is_success:
                    raise TransferError(f"download returned HTTP {resp.status_code}")
                # Count bytes as they arrive, the body can be far larger than memory allows.
                async for chunk in resp.aiter_bytes():
                    received += len(chunk)
        except httpx.HTTPError as e:
            raise TransferError(f"download from {self._url} failed: {e}") from e
        elapsed = self._clock() - started
        return throughput_mbps(received, elapsed)
