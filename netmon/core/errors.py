from __future__ import annotations


class MonitorError(Exception):
    """Base class for every error raised by the monitor."""


class ConfigError(MonitorError):
    """Invalid configuration. Only raised at startup."""


class ProbeError(MonitorError):
    """A probe could not produce a measurement."""


class Unreachable(ProbeError):
    """The latency target did not answer within the timeout."""


class TransferError(ProbeError):
    """An HTTP transfer failed: connection error, non-2xx status or timeout."""


class SubmissionError(MonitorError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
