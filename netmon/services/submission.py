from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from netmon.core.errors import SubmissionError
from netmon.models.metric import MetricBatch
from netmon.repositories.base import MetricRepository
from netmon.services.retry import RetryPolicy

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class SubmissionService:
    def __init__(
        self,
        *,
        repo: MetricRepository,
        policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._repo = repo
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def submit(self, batch: MetricBatch) -> bool:
        """Write one batch, retrying with backoff. Returns False when the batch was dropped."""
        if batch.is_empty:
            logger.info("Tick %d produced no points, nothing to submit", batch.tick)
            return True

        attempts = self._policy.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                await self._repo.write_batch(batch)
            except SubmissionError as e:
                if attempt == attempts:
                    logger.error(
                        "Dropping batch of tick %d (%d points) after %d attempts: %s",
                        batch.tick,
                        len(batch),
                        attempts,
                        e,
                    )
                    return False
                delay = self._policy.delay_after(attempt)
                logger.warning(
                    "Write attempt %d/%d for tick %d failed: %s; retrying in %.2fs",
                    attempt,
                    attempts,
                    batch.tick,
                    e,
                    delay,
                )
                await self._sleep(delay)
            else:
                logger.info(
                    "Wrote %d points for tick %d to the store", len(batch), batch.tick
                )
                return True
        return False
