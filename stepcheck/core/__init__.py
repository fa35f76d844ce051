"""
Discovery, classification, execution and report assembly for step progress.

Everything here is transport-agnostic; the HTTP app and CLIs call into it.
"""

from .classifier import Classification, classify_all_passed, classify_declared, classify_executed
from .config import ProgressMode, ProgressSettings, load_progress_pointer, parse_mode
from .discovery import Artifact, discover_artifacts
from .errors import ConfigurationInvalid, ConfigurationMissing, StepcheckError
from .executor import ExecutionOutcome, OutcomeKind, TestExecutor
from .report import ExecutionDiagnostic, ProgressReport, assemble_report

__all__ = [
    "Artifact",
    "Classification",
    "ConfigurationInvalid",
    "ConfigurationMissing",
    "ExecutionDiagnostic",
    "ExecutionOutcome",
    "OutcomeKind",
    "ProgressMode",
    "ProgressReport",
    "ProgressSettings",
    "StepcheckError",
    "TestExecutor",
    "assemble_report",
    "classify_all_passed",
    "classify_declared",
    "classify_executed",
    "discover_artifacts",
    "load_progress_pointer",
    "parse_mode",
]
