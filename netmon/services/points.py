from __future__ import annotations

from typing import Mapping

from netmon.models.metric import MetricPoint
from netmon.models.probe import ProbeFailure, ProbeResult

UNIT_TAG = "unit"


def build_point(
    result: ProbeResult, *, measurement: str, tags: Mapping[str, str]
) -> MetricPoint | None:
    """Turn one probe result into at most one metric point.

    Failures produce nothing: a zero-valued point would drag down every
    average computed over the series. The point is stamped with the instant
    the probe completed, not the instant it is built or submitted.
    """
    if isinstance(result, ProbeFailure):
        return None
    return MetricPoint(
        measurement=measurement,
        value=float(result.value),
        timestamp_ns=result.completed_at_ns,
        tags={**tags, UNIT_TAG: result.unit.value},
    )
