"""Run one numbered test file in its own child process and capture the outcome.

The executor never raises for test or launcher problems. A test that exits
non-zero, a runner that cannot be started, and a run that exceeds the timeout
all come back as an ``ExecutionOutcome`` the caller can report on.
"""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import time
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Mapping, Sequence

import anyio
from anyio.abc import ByteReceiveStream, Process

if TYPE_CHECKING:
    from stepcheck.core.config import ProgressSettings

LOGGER = logging.getLogger(__name__)

LAUNCH_FAILURE_EXIT_CODE = 127
FILE_PLACEHOLDER = "{file}"
TRUNCATION_MARKER = "\n... [output truncated]"
GENERIC_FAILURE = "test failed"
DRAIN_GRACE_SECONDS = 1.0


class OutcomeKind(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    LAUNCH_FAILED = "launch_failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of running a single test file."""

    target: Path
    kind: OutcomeKind
    exit_code: int | None
    stdout: str = ""
    stderr: str = ""
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.PASSED

    @property
    def summary(self) -> str:
        if self.kind is OutcomeKind.TIMED_OUT:
            return f"{self.target.name} timed out after {self.duration_seconds:.1f}s"
        return first_meaningful_line(self.stderr, self.stdout)


def first_meaningful_line(*streams: str) -> str:
    """First non-blank line across ``streams`` in order, or a generic message."""
    for text in streams:
        for line in (text or "").splitlines():
            if line.strip():
                return line.strip()
    return GENERIC_FAILURE


def truncate_output(text: str, limit: int) -> str:
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


async def _drain(stream: ByteReceiveStream | None, sink: List[bytes]) -> None:
    if stream is None:
        return
    async for chunk in stream:
        sink.append(chunk)


def _decode(chunks: List[bytes]) -> str:
    return b"".join(chunks).decode("utf-8", errors="replace")


def _kill_tree(process: Process) -> None:
    # The runner (npx, a shell) may have spawned the real test process.
    if hasattr(os, "killpg"):
        with suppress(ProcessLookupError, PermissionError):
            os.killpg(process.pid, signal.SIGKILL)
            return
    with suppress(ProcessLookupError):
        process.kill()


class TestExecutor:
    """Launch a test runner against exactly one file per call."""

    __test__ = False  # keep pytest from collecting this as a test class

    def __init__(
        self,
        runner: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout_seconds: float | None = None,
        output_limit: int = 6000,
        env: Mapping[str, str] | None = None,
    ) -> None:
        if not runner:
            raise ValueError("runner must name at least one executable")
        self.runner = list(runner)
        self.cwd = cwd
        self.timeout_seconds = timeout_seconds
        self.output_limit = output_limit
        self.env = dict(env) if env is not None else None

    @classmethod
    def from_settings(cls, settings: ProgressSettings) -> "TestExecutor":
        return cls(
            settings.runner,
            cwd=settings.project_root,
            timeout_seconds=settings.timeout_seconds,
            output_limit=settings.output_limit,
        )

    def command_for(self, target: Path) -> List[str]:
        if any(FILE_PLACEHOLDER in arg for arg in self.runner):
            return [arg.replace(FILE_PLACEHOLDER, str(target)) for arg in self.runner]
        return [*self.runner, str(target)]

    async def run(self, target: Path) -> ExecutionOutcome:
        """Run the test at ``target`` and wait for it to finish (or time out)."""
        command = self.command_for(target)
        LOGGER.info("Running %s", shlex.join(command))
        started = time.perf_counter()

        try:
            process = await anyio.open_process(
                command,
                cwd=self.cwd,
                env=self.env,
                stdin=subprocess.DEVNULL,
                start_new_session=hasattr(os, "killpg"),
            )
        except (OSError, ValueError) as exc:
            LOGGER.warning("Could not launch test runner %s: %s", command[0], exc)
            return ExecutionOutcome(
                target=target,
                kind=OutcomeKind.LAUNCH_FAILED,
                exit_code=LAUNCH_FAILURE_EXIT_CODE,
                stderr=f"Failed to launch {command[0]}: {exc}",
                duration_seconds=time.perf_counter() - started,
            )

        stdout_chunks: List[bytes] = []
        stderr_chunks: List[bytes] = []
        async with process:
            async with anyio.create_task_group() as group:
                group.start_soon(_drain, process.stdout, stdout_chunks)
                group.start_soon(_drain, process.stderr, stderr_chunks)
                with anyio.move_on_after(self.timeout_seconds) as scope:
                    await process.wait()
                timed_out = scope.cancelled_caught
                if timed_out:
                    _kill_tree(process)
                    await process.wait()
                # Processes the test left running can hold the pipes open.
                group.cancel_scope.deadline = anyio.current_time() + DRAIN_GRACE_SECONDS
            exit_code = process.returncode

        duration = time.perf_counter() - started
        stdout = truncate_output(_decode(stdout_chunks), self.output_limit)
        stderr = truncate_output(_decode(stderr_chunks), self.output_limit)

        if timed_out:
            LOGGER.warning("Test %s timed out after %.1fs; child killed", target.name, duration)
            note = f"Test runner killed after exceeding {self.timeout_seconds}s timeout"
            stderr = f"{stderr.rstrip()}\n{note}" if stderr.strip() else note
            kind = OutcomeKind.TIMED_OUT
        elif exit_code == 0:
            kind = OutcomeKind.PASSED
        else:
            LOGGER.info("Test %s failed with exit code %s", target.name, exit_code)
            kind = OutcomeKind.FAILED

        return ExecutionOutcome(
            target=target,
            kind=kind,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            duration_seconds=duration,
        )


__all__ = [
    "ExecutionOutcome",
    "LAUNCH_FAILURE_EXIT_CODE",
    "OutcomeKind",
    "TestExecutor",
    "first_meaningful_line",
    "truncate_output",
]
