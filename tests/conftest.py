from __future__ import annotations

import os
from typing import Iterator

import pytest

from stepcheck.pipeline.bootstrap import ENV_FIELDS, ENV_PROJECT_ROOT

STEPCHECK_ENV_KEYS = (*ENV_FIELDS.values(), ENV_PROJECT_ROOT)


@pytest.fixture(autouse=True)
def _isolate_stepcheck_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep STEPCHECK_* values (including ones loaded from .env files) test-local."""
    for key in STEPCHECK_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield
    for key in STEPCHECK_ENV_KEYS:
        os.environ.pop(key, None)
