from __future__ import annotations

from influxdb_client import Point, WritePrecision

from netmon.models.metric import MetricBatch, MetricPoint

VALUE_FIELD = "value"


def to_influx_point(point: MetricPoint) -> Point:
    record = Point(point.measurement)
    for key, value in point.tags.items():
        record = record.tag(key, value)
    return record.field(VALUE_FIELD, float(point.value)).time(
        point.timestamp_ns, WritePrecision.NS
    )


def to_line(point: MetricPoint) -> str:
    # e.g. latency,host=box,unit=ms value=23.4 1700000000000000000
    return to_influx_point(point).to_line_protocol()


def serialize_batch(batch: MetricBatch) -> str:
    lines = [to_line(point) for point in batch]
    # Point renders non-finite values as an empty record, the store rejects those.
    return "\n".join(line for line in lines if line)
