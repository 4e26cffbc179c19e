from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

from netmon.core.errors import ProbeError
from netmon.models.metric import MetricBatch, MetricPoint
from netmon.models.probe import ProbeFailure, ProbeResult, ProbeSuccess
from netmon.probes.base import Probe
from netmon.services.points import build_point
from netmon.services.submission import SubmissionService

logger = logging.getLogger(__name__)

# Probes enforce their own timeout and raise a typed error; the outer wait only
# abandons a probe that failed to do so.
TIMEOUT_MARGIN_SECONDS = 0.5


@dataclass(frozen=True)
class TickResult:
    tick: int
    results: tuple[ProbeResult, ...]
    batch: MetricBatch
    submitted: bool

    @property
    def failed(self) -> list[str]:
        return [r.probe for r in self.results if isinstance(r, ProbeFailure)]


class MonitorService:
    """Runs the probe set once per tick and hands the resulting batch to the store."""

    def __init__(
        self,
        *,
        probes: Sequence[Probe],
        submission: SubmissionService,
        tags: Mapping[str, str] | None = None,
        now_ns: Callable[[], int] = time.time_ns,
    ) -> None:
        self._probes = list(probes)
        self._submission = submission
        self._tags = dict(tags or {})
        self._now_ns = now_ns

    @property
    def probes(self) -> list[Probe]:
        return list(self._probes)

    async def run_probe(self, probe: Probe) -> ProbeResult:
        try:
            value = await asyncio.wait_for(
                probe.measure(), timeout=probe.timeout_seconds + TIMEOUT_MARGIN_SECONDS
            )
        except asyncio.TimeoutError:
            reason = f"timed out after {probe.timeout_seconds:g}s"
        except ProbeError as e:
            reason = f"{type(e).__name__}: {e}"
        except Exception as e:  # noqa: BLE001
            logger.exception("Probe %s crashed", probe.name)
            reason = f"unexpected {type(e).__name__}: {e}"
        else:
            result = ProbeSuccess(
                probe=probe.name,
                value=float(value),
                unit=probe.unit,
                completed_at_ns=self._now_ns(),
            )
            logger.info("%s: %.2f %s", probe.name, result.value, result.unit.value)
            return result

        completed_at = self._now_ns()
        logger.warning("Failed to measure %s: %s", probe.name, reason)
        return ProbeFailure(probe=probe.name, reason=reason, completed_at_ns=completed_at)

    async def collect(self, tick: int) -> tuple[tuple[ProbeResult, ...], MetricBatch]:
        results: list[ProbeResult] = []
        points: list[MetricPoint] = []

        async def _measure(probe: Probe) -> None:
            result = await self.run_probe(probe)
            results.append(result)
            point = build_point(result, measurement=probe.name, tags=self._tags)
            if point is not None:
                points.append(point)

        # Points are appended as probes finish, so the batch follows completion order.
        await asyncio.gather(*(_measure(probe) for probe in self._probes))
        return tuple(results), MetricBatch(tick=tick, points=tuple(points))

    async def tick(self, tick: int) -> TickResult:
        results, batch = await self.collect(tick)
        submitted = await self._submission.submit(batch)
        return TickResult(tick=tick, results=results, batch=batch, submitted=submitted)
