from __future__ import annotations

from typing import Protocol

from netmon.models.metric import MetricBatch


class MetricRepository(Protocol):
    async def ping(self) -> None: ...

    async def write_batch(self, batch: MetricBatch) -> None: ...
