"""Compute one progress report: discover, classify, assemble."""

from __future__ import annotations

import logging

from stepcheck.core.classifier import (
    Classification,
    Executor,
    classify_all_passed,
    classify_declared,
    classify_executed,
)
from stepcheck.core.config import ProgressMode, ProgressSettings, load_progress_pointer
from stepcheck.core.discovery import discover_artifacts
from stepcheck.core.executor import TestExecutor
from stepcheck.core.report import ProgressReport, assemble_report

LOGGER = logging.getLogger(__name__)


async def compute_progress(settings: ProgressSettings, *, executor: Executor | None = None) -> ProgressReport:
    """Recompute progress from disk for a single request.

    Nothing is cached between calls. Executed mode spawns one child process per
    call; concurrent calls spawn independent children.
    """
    artifacts = discover_artifacts(settings.resolved_test_dir)

    classification: Classification
    if settings.force_all_passed:
        LOGGER.debug("Force-pass override active; skipping pointer and execution")
        classification = classify_all_passed(artifacts)
    elif settings.mode is ProgressMode.DECLARED:
        pointer = load_progress_pointer(settings.resolved_pointer_file)
        classification = classify_declared(artifacts, pointer)
    else:
        runner = executor or TestExecutor.from_settings(settings)
        classification = await classify_executed(artifacts, runner)

    return assemble_report(
        mode=settings.mode,
        current=classification.current,
        passed=classification.passed,
        locked=classification.locked,
        total=classification.total,
        next_step=classification.next_step,
        execution=classification.execution,
    )


__all__ = ["compute_progress"]
