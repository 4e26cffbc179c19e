from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union


class Unit(str, enum.Enum):
    MILLISECONDS = "ms"
    MEGABITS_PER_SECOND = "mbps"


@dataclass(frozen=True)
class ProbeSuccess:
    probe: str
    value: float
    unit: Unit
    completed_at_ns: int


@dataclass(frozen=True)
class ProbeFailure:
    probe: str
    reason: str
    completed_at_ns: int


ProbeResult = Union[ProbeSuccess, ProbeFailure]
