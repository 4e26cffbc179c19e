from __future__ import annotations

import httpx

DEFAULT_USER_AGENT = "internet-monitor/0.1"


def create_probe_client(
    *,
    timeout_seconds: float,
    user_agent: str = DEFAULT_USER_AGENT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    # Probes must measure the network, never a cached response.
    return httpx.AsyncClient(
        timeout=timeout_seconds,
        follow_redirects=True,
        headers={
            "User-Agent": user_agent,
            "Cache-Control": "no-cache",
        },
        transport=transport,
    )
