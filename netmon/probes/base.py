from __future__ import annotations

from typing import Protocol

from netmon.core.errors import TransferError
from netmon.models.probe import Unit


class Probe(Protocol):
    name: str
    unit: Unit
    timeout_seconds: float

    async def measure(self) -> float:
        """Run one measurement and return its value in ``unit``."""
        ...


def throughput_mbps(num_bytes: int, elapsed_seconds: float) -> float:
    if num_bytes <= 0:
        raise TransferError("no bytes transferred")
    if elapsed_seconds <= 0:
        raise TransferError("transfer finished in no measurable time")
    return num_bytes * 8 / elapsed_seconds / 1_000_000
