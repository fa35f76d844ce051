"""Settings bootstrap and per-request progress computation."""

from __future__ import annotations

from .bootstrap import load_settings
from .runtime import compute_progress

__all__ = ["compute_progress", "load_settings"]
