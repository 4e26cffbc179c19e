from __future__ import annotations

from dataclasses import dataclass

from netmon.core.config import Settings


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_seconds: float = 0.5
    multiplier: float = 2.0
    max_delay_seconds: float = 5.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_seconds < 0 or self.max_delay_seconds < 0:
            raise ValueError("retry delays must not be negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.submit_max_attempts,
            base_delay_seconds=settings.submit_base_delay_seconds,
            multiplier=settings.submit_backoff_multiplier,
            max_delay_seconds=settings.submit_max_delay_seconds,
        )

    def delay_after(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt (1-based)."""
        delay = self.base_delay_seconds * self.multiplier ** (attempt - 1)
        return min(delay, self.max_delay_seconds)

    def delays(self) -> list[float]:
        return [self.delay_after(attempt) for attempt in range(1, self.max_attempts)]
