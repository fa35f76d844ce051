"""
Step-based exercise progress reporting.

Importing the package is cheap; the HTTP app and CLIs live in their own modules.
"""

from importlib import metadata


def get_version() -> str:
    """Return the installed project version."""
    try:
        return metadata.version("stepcheck")
    except metadata.PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]
