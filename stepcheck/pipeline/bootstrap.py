"""Build ``ProgressSettings`` from explicit overrides, the environment and ``.env``."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

from stepcheck.core.config import ProgressSettings

LOGGER = logging.getLogger(__name__)

ENV_PROJECT_ROOT = "STEPCHECK_PROJECT_ROOT"
ENV_FIELDS: Dict[str, str] = {
    "mode": "STEPCHECK_MODE",
    "force_all_passed": "STEPCHECK_FORCE_ALL_PASSED",
    "test_dir": "STEPCHECK_TEST_DIR",
    "pointer_file": "STEPCHECK_POINTER_FILE",
    "runner": "STEPCHECK_RUNNER",
    "timeout_seconds": "STEPCHECK_TIMEOUT",
    "output_limit": "STEPCHECK_OUTPUT_LIMIT",
}


def _capture_env() -> Dict[str, str]:
    snapshot: Dict[str, str] = {}
    for field_name, key in ENV_FIELDS.items():
        value = os.getenv(key)
        if value is not None:
            snapshot[field_name] = value
    return snapshot


def load_settings(project_root: Path | str | None = None, **overrides: Any) -> ProgressSettings:
    """
    Resolve settings for a progress service.

    Parameters
    ----------
    project_root:
        Directory holding ``test/`` and the pointer file. Defaults to
        ``STEPCHECK_PROJECT_ROOT`` or the current working directory.
    overrides:
        ``ProgressSettings`` fields set by the caller (CLI flags). ``None``
        values are ignored so unset flags fall through to the environment.
    """

    root_value = project_root or os.getenv(ENV_PROJECT_ROOT) or Path.cwd()
    root = Path(root_value).expanduser().resolve()
    # Process env wins over .env; load_dotenv does not override by default.
    load_dotenv(root / ".env")

    payload: Dict[str, Any] = {"project_root": root, **_capture_env()}
    payload.update({key: value for key, value in overrides.items() if value is not None})
    settings = ProgressSettings.model_validate(payload)
    LOGGER.debug(
        "Progress settings: mode=%s force_all_passed=%s test_dir=%s",
        settings.mode.value,
        settings.force_all_passed,
        settings.resolved_test_dir,
    )
    return settings


__all__ = ["ENV_FIELDS", "ENV_PROJECT_ROOT", "load_settings"]
