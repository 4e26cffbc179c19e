from __future__ import annotations

import time
from typing import Callable

import httpx

from netmon.core.errors import TransferError
from netmon.models.probe import Unit
from netmon.probes.base import throughput_mbps

_PATTERN = bytes(range(256))


def build_payload(size: int) -> bytes:
    repeats, remainder = divmod(size, len(_PATTERN))
    return _PATTERN * repeats + _PATTERN[:remainder]


class UploadProbe:
    name = "upload"
    unit = Unit.MEGABITS_PER_SECOND

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        url: str,
        size_bytes: int = 1024 * 1024,
        timeout_seconds: float = 30.0,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._client = client
        self._url = url
        self._payload = build_payload(size_bytes)
        self.timeout_seconds = timeout_seconds
        self._clock = clock

    async def measure(self) -> float:
        started = self._clock()
        try:
            resp = await self._client.post(
                self._url,
                content=self._payload,
                timeout=self.timeout_seconds,
                headers={"Content-Type": "application/octet-stream"},
            )
        except httpx.HTTPError as e:
            raise TransferError(f"upload to {self._url} failed: {e}") from e
        elapsed = self._clock() - started
        if not resp.is_success:
            raise TransferError(f"upload returned HTTP {resp.status_code}")
        return throughput_mbps(len(self._payload), elapsed)
