"""Error taxonomy for progress requests that cannot be answered normally."""

from __future__ import annotations

from typing import Dict


class StepcheckError(Exception):
    """Base class for failures that must reach the caller as an error payload."""

    category = "StepcheckError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, str]:
        return {"error": self.category, "message": self.message}


class ConfigurationMissing(StepcheckError):
    """The pointer document required by declared-position mode does not exist."""

    category = "ConfigurationMissing"


class ConfigurationInvalid(StepcheckError):
    """The pointer document exists but yields no usable artifact identifier."""

    category = "ConfigurationInvalid"


__all__ = ["ConfigurationInvalid", "ConfigurationMissing", "StepcheckError"]
