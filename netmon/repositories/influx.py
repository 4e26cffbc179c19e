from __future__ import annotations

import httpx

from netmon.core.errors import SubmissionError
from netmon.models.metric import MetricBatch
from netmon.repositories.line_protocol import serialize_batch


class InfluxLineProtocolRepository:
    """Writes batches through the InfluxDB 1.x HTTP write API."""

    def __init__(self, *, client: httpx.AsyncClient, database: str) -> None:
        self._client = client
        self._database = database

    async def ping(self) -> None:
        try:
            resp = await self._client.get("/ping")
        except httpx.HTTPError as e:
            raise SubmissionError(f"store ping failed: {e}") from e
        if not resp.is_success:
            raise SubmissionError(
                f"store ping returned HTTP {resp.status_code}", status_code=resp.status_code
            )

    async def write_batch(self, batch: MetricBatch) -> None:
        body = serialize_batch(batch)
        if not body:
            return
        try:
            resp = await self._client.post(
                "/write",
                params={"db": self._database, "precision": "ns"},
                content=body.encode("utf-8"),
            )
        except httpx.HTTPError as e:
            raise SubmissionError(f"write request failed: {e}") from e
        if not resp.is_success:
            detail = resp.text.strip()[:200]
            raise SubmissionError(
                f"write returned HTTP {resp.status_code}: {detail}",
                status_code=resp.status_code,
            )
