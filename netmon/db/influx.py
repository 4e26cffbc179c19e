from __future__ import annotations

import httpx

from netmon.core.config import Settings


def create_influx_client(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    credentials = settings.influx_credentials
    return httpx.AsyncClient(
        base_url=str(settings.influx_url),
        auth=httpx.BasicAuth(*credentials) if credentials is not None else None,
        timeout=settings.influx_timeout_seconds,
        headers={"Content-Type": "text/plain; charset=utf-8"},
        transport=transport,
    )
