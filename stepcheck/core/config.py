"""
Typed configuration for progress computation.

The settings object is built once (CLI flags, environment, ``.env``) and passed
into the pipeline, so the core never consults process arguments directly.
"""

from __future__ import annotations

import json
import shlex
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from stepcheck.core.discovery import parse_identifier
from stepcheck.core.errors import ConfigurationInvalid, ConfigurationMissing

DEFAULT_RUNNER: tuple[str, ...] = ("npx", "mocha")
DEFAULT_TIMEOUT_SECONDS = 120.0
DEFAULT_OUTPUT_LIMIT = 6000


class ProgressMode(str, Enum):
    """How the learner's current position is determined."""

    DECLARED = "declared"
    EXECUTED = "executed"

    @classmethod
    def choices(cls) -> List[str]:
        return [member.value for member in cls]


def parse_mode(value: str | ProgressMode | None) -> ProgressMode:
    """Convert a CLI/env string into a ``ProgressMode`` (empty → declared)."""
    if isinstance(value, ProgressMode):
        return value
    if not value or not value.strip():
        return ProgressMode.DECLARED
    token = value.strip().lower()
    try:
        return ProgressMode(token)
    except ValueError as exc:
        valid = ", ".join(ProgressMode.choices())
        raise ValueError(f"Unknown mode '{value}'. Valid options: {valid}") from exc


class ProgressSettings(BaseModel):
    """Runtime configuration for one progress service instance."""

    model_config = ConfigDict(frozen=True)

    mode: ProgressMode = ProgressMode.DECLARED
    force_all_passed: bool = False
    project_root: Path = Field(default_factory=Path.cwd)
    test_dir: Path | None = None
    pointer_file: Path | None = None
    runner: List[str] = Field(default_factory=lambda: list(DEFAULT_RUNNER))
    timeout_seconds: float | None = Field(default=DEFAULT_TIMEOUT_SECONDS)
    output_limit: int = Field(default=DEFAULT_OUTPUT_LIMIT, ge=0)

    @field_validator("mode", mode="before")
    @classmethod
    def coerce_mode(cls, value: Any) -> ProgressMode:
        return parse_mode(value)

    @field_validator("project_root", mode="before")
    @classmethod
    def coerce_root(cls, value: Any) -> Path:
        return Path(value).expanduser().resolve()

    @field_validator("test_dir", "pointer_file", mode="before")
    @classmethod
    def coerce_optional_path(cls, value: Any) -> Path | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return Path(value).expanduser()

    @field_validator("runner", mode="before")
    @classmethod
    def split_runner(cls, value: Any) -> Any:
        if isinstance(value, str):
            return shlex.split(value)
        return value

    @field_validator("runner")
    @classmethod
    def require_runner(cls, value: List[str]) -> List[str]:
        if not value or not value[0].strip():
            raise ValueError("runner must name at least one executable")
        return value

    @field_validator("timeout_seconds", mode="before")
    @classmethod
    def disable_nonpositive_timeout(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if float(value) <= 0:
            return None
        return value

    @property
    def resolved_test_dir(self) -> Path:
        return self._under_root(self.test_dir, Path("test"))

    @property
    def resolved_pointer_file(self) -> Path:
        return self._under_root(self.pointer_file, Path(".mocharc.json"))

    def _under_root(self, value: Path | None, default: Path) -> Path:
        candidate = value if value is not None else default
        if not candidate.is_absolute():
            candidate = self.project_root / candidate
        return candidate.resolve()


def read_pointer_document(path: Path) -> Dict[str, Any]:
    """Load a mocha-style run-config document.

    ``.json`` files go through ``json``; anything else (``.yml``, ``.yaml``,
    extensionless) is read as YAML.
    """
    if not path.exists():
        raise ConfigurationMissing(f"Progress pointer file not found at {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            if path.suffix.lower() == ".json":
                data = json.load(handle)
            else:
                data = yaml.safe_load(handle)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationMissing(f"Cannot read progress pointer file {path}: {exc}") from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationInvalid(f"Malformed progress pointer file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationInvalid(f"Expected mapping at root of {path}, received {type(data).__name__}")
    return data


def load_progress_pointer(path: Path) -> str:
    """Return the artifact identifier the learner is currently assigned."""
    data = read_pointer_document(path)
    spec = data.get("spec")
    if isinstance(spec, list):
        spec = spec[0] if spec else None
    if not isinstance(spec, str) or not spec.strip():
        raise ConfigurationInvalid(f"No 'spec' entry declaring the current step in {path}")

    identifier = Path(spec.strip()).name
    if parse_identifier(identifier) is None:
        raise ConfigurationInvalid(f"Current step '{identifier}' in {path} is not a numbered test file")
    return identifier


__all__ = [
    "DEFAULT_OUTPUT_LIMIT",
    "DEFAULT_RUNNER",
    "DEFAULT_TIMEOUT_SECONDS",
    "ProgressMode",
    "ProgressSettings",
    "load_progress_pointer",
    "parse_mode",
    "read_pointer_document",
]
