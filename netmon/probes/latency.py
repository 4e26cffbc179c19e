from __future__ import annotations

import asyncio
import contextlib
import re
import shutil
from dataclasses import dataclass
from typing import Awaitable, Callable

from netmon.core.errors import ProbeError, Unreachable
from netmon.models.probe import Unit

# Linux prints "rtt min/avg/max/mdev = ...", BSD and macOS "round-trip min/avg/max/stddev = ...".
PING_SUMMARY_RE = re.compile(
    r"(?:rtt|round-trip).* = ([0-9.]+)/([0-9.]+)/([0-9.]+)/([0-9.]+) ?ms"
)

# ping exits with 1 when no reply came back, 2 (or anything else) on other errors.
PING_NO_REPLY_EXIT = 1


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


CommandRunner = Callable[[list[str], float], Awaitable[CommandResult]]


async def run_command(argv: list[str], timeout_seconds: float) -> CommandResult:
    """Run a command, killing it if it outlives the timeout or the caller is cancelled."""
    proc = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_seconds)
    finally:
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
    return CommandResult(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def parse_average_rtt(output: str) -> float:
    match = PING_SUMMARY_RE.search(output)
    if match is None:
        raise ProbeError("could not find the round-trip summary in ping output")
    try:
        return float(match.group(2))
    except ValueError as e:
        raise ProbeError(f"unparseable average round-trip time {match.group(2)!r}") from e


class LatencyProbe:
    name = "latency"
    unit = Unit.MILLISECONDS

    def __init__(
        self,
        *,
        host: str,
        count: int = 4,
        timeout_seconds: float = 10.0,
        ping_binary: str | None = None,
        runner: CommandRunner = run_command,
    ) -> None:
        self._host = host
        self._count = count
        self.timeout_seconds = timeout_seconds
        self._ping_binary = ping_binary or shutil.which("ping") or "ping"
        self._runner = runner

    @property
    def host(self) -> str:
        return self._host

    async def measure(self) -> float:
        argv = [self._ping_binary, "-c", str(self._count), self._host]
        try:
            result = await self._runner(argv, self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise Unreachable(
                f"no reply from {self._host} within {self.timeout_seconds:g}s"
            ) from e
        except OSError as e:
            raise ProbeError(f"could not run {self._ping_binary}: {e}") from e

        if result.returncode == PING_NO_REPLY_EXIT:
            raise Unreachable(f"no reply from {self._host}")
        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip() or "no output"
            raise ProbeError(f"ping exited with status {result.returncode}: {detail}")
        return parse_average_rtt(result.stdout)
