"""Progress report value types and the pure assembler that normalizes them."""

from __future__ import annotations

import math
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from stepcheck.core.config import ProgressMode
from stepcheck.core.executor import ExecutionOutcome


class ExecutionDiagnostic(BaseModel):
    """What happened when the current step's test was actually run."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    file: str
    passed: bool
    outcome: str
    exit_code: Optional[int] = Field(default=None, alias="exitCode")
    standard_output: str = Field(default="", alias="standardOutput")
    standard_error: str = Field(default="", alias="standardError")
    error_message: Optional[str] = Field(default=None, alias="errorMessage")
    duration_seconds: float = Field(default=0.0, alias="durationSeconds")

    @classmethod
    def from_outcome(cls, identifier: str, outcome: ExecutionOutcome) -> "ExecutionDiagnostic":
        return cls(
            file=identifier,
            passed=outcome.succeeded,
            outcome=outcome.kind.value,
            exit_code=outcome.exit_code,
            standard_output=outcome.stdout,
            standard_error=outcome.stderr,
            error_message=None if outcome.succeeded else outcome.summary,
            duration_seconds=round(outcome.duration_seconds, 3),
        )


class ProgressReport(BaseModel):
    """Normalized payload returned for every progress request."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    mode: ProgressMode
    current: Optional[str] = None
    passed: List[str] = Field(default_factory=list)
    locked: List[str] = Field(default_factory=list)
    total: int = 0
    passed_count: int = Field(default=0, alias="passedCount")
    locked_count: int = Field(default=0, alias="lockedCount")
    passed_percent: int = Field(default=0, ge=0, le=100, alias="passedPercent")
    locked_percent: int = Field(default=0, ge=0, le=100, alias="lockedPercent")
    progress: int = Field(default=0, ge=0, le=100)
    next: Optional[str] = None
    execution: Optional[ExecutionDiagnostic] = None

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys; ``execution`` only when a test ran."""
        payload = self.model_dump(mode="json", by_alias=True)
        if self.execution is None:
            payload.pop("execution", None)
        return payload


def percent(count: int, total: int) -> int:
    """Whole percentage of ``count`` over ``total``, rounding halves up."""
    if total <= 0:
        return 0
    value = math.floor(count / max(total, 1) * 100 + 0.5)
    return max(0, min(100, int(value)))


def _safe_total(total: Any) -> int:
    if total is None or isinstance(total, bool):
        return 0
    try:
        number = float(total)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    return int(number)


def assemble_report(
    *,
    mode: ProgressMode,
    current: str | None,
    passed: Sequence[str],
    locked: Sequence[str],
    total: Any,
    next_step: str | None,
    execution: ExecutionDiagnostic | None = None,
) -> ProgressReport:
    """Derive counts and percentages from a classifier result.

    Never raises for odd inputs: a missing or non-finite ``total`` counts as
    zero, and ``total`` is never reported below ``passed + locked``.
    """
    passed_list = list(passed)
    locked_list = list(locked)
    safe_total = max(_safe_total(total), len(passed_list) + len(locked_list))
    passed_percent = percent(len(passed_list), safe_total)
    return ProgressReport(
        mode=mode,
        current=current,
        passed=passed_list,
        locked=locked_list,
        total=safe_total,
        passed_count=len(passed_list),
        locked_count=len(locked_list),
        passed_percent=passed_percent,
        locked_percent=percent(len(locked_list), safe_total),
        progress=passed_percent,
        next=next_step,
        execution=execution,
    )


__all__ = ["ExecutionDiagnostic", "ProgressReport", "assemble_report", "percent"]
