"""Partition discovered steps into passed / current / locked."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence, Tuple

from stepcheck.core.discovery import Artifact, step_key
from stepcheck.core.errors import ConfigurationInvalid
from stepcheck.core.executor import ExecutionOutcome
from stepcheck.core.report import ExecutionDiagnostic

LOGGER = logging.getLogger(__name__)


class Executor(Protocol):
    async def run(self, target: Path) -> ExecutionOutcome: ...


@dataclass(frozen=True)
class Classification:
    """Classifier output before counts and percentages are derived."""

    current: str | None
    passed: Tuple[str, ...] = ()
    locked: Tuple[str, ...] = ()
    total: int = 0
    next_step: str | None = None
    execution: ExecutionDiagnostic | None = None


def classify_all_passed(artifacts: Sequence[Artifact]) -> Classification:
    """Force-pass override: every discovered step counts as passed."""
    return Classification(
        current=None,
        passed=tuple(artifact.identifier for artifact in artifacts),
        total=len(artifacts),
    )


def classify_declared(artifacts: Sequence[Artifact], pointer: str) -> Classification:
    """Split steps around the learner's declared current step.

    Steps strictly before the pointer are passed and steps strictly after are
    locked. The pointer itself is ``current`` and lands in neither list, even
    when no file with that name was discovered.
    """
    pointer_key = step_key(pointer)
    if pointer_key is None:
        raise ConfigurationInvalid(f"Current step '{pointer}' is not a numbered test file")

    passed = tuple(artifact.identifier for artifact in artifacts if artifact.sort_key < pointer_key)
    locked = tuple(artifact.identifier for artifact in artifacts if artifact.sort_key > pointer_key)
    return Classification(
        current=pointer,
        passed=passed,
        locked=locked,
        total=len(artifacts),
        next_step=locked[0] if locked else None,
    )


async def classify_executed(artifacts: Sequence[Artifact], executor: Executor) -> Classification:
    """Run the lowest step's test and report whether the learner may advance.

    A failing run keeps ``next`` on the same step. Later steps are never run,
    so ``locked`` stays empty in this mode.
    """
    if not artifacts:
        return Classification(current=None)

    current = artifacts[0]
    if current.path is None:
        raise ValueError(f"Step {current.identifier} has no path to execute")
    outcome = await executor.run(current.path)
    diagnostic = ExecutionDiagnostic.from_outcome(current.identifier, outcome)

    if outcome.succeeded:
        following = artifacts[1].identifier if len(artifacts) > 1 else None
        return Classification(
            current=current.identifier,
            passed=(current.identifier,),
            total=len(artifacts),
            next_step=following,
            execution=diagnostic,
        )

    LOGGER.info("Step %s not passed (%s); learner stays on it", current.identifier, outcome.kind.value)
    return Classification(
        current=current.identifier,
        total=len(artifacts),
        next_step=current.identifier,
        execution=diagnostic,
    )


__all__ = [
    "Classification",
    "Executor",
    "classify_all_passed",
    "classify_declared",
    "classify_executed",
]
