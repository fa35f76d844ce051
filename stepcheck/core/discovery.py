"""Discover numbered test files (``1.test.js``, ``1.1.test.js``, ``20.test.js``)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

LOGGER = logging.getLogger(__name__)
ARTIFACT_PATTERN = re.compile(r"^(?P<major>\d+)(?:\.(?P<minor>\d+))?\.test\.[A-Za-z0-9]+$")


@dataclass(frozen=True)
class Artifact:
    """One numbered test file as seen on disk at request time."""

    identifier: str
    major: int
    minor: int | None = None
    path: Path | None = None

    @property
    def step(self) -> float:
        if self.minor is None:
            return float(self.major)
        return float(f"{self.major}.{self.minor}")

    @property
    def sort_key(self) -> Tuple[int, int]:
        # Sub-steps compare as integer pairs, so 10.3 sorts before 10.25.
        return (self.major, -1 if self.minor is None else self.minor)


def parse_identifier(identifier: str) -> Tuple[int, int | None] | None:
    """Return ``(major, minor)`` for a conforming filename, otherwise ``None``."""
    match = ARTIFACT_PATTERN.match(identifier)
    if not match:
        return None
    minor = match.group("minor")
    return int(match.group("major")), (int(minor) if minor is not None else None)


def step_key(identifier: str) -> Tuple[int, int] | None:
    parsed = parse_identifier(identifier)
    if parsed is None:
        return None
    return Artifact(identifier=identifier, major=parsed[0], minor=parsed[1]).sort_key


def discover_artifacts(test_dir: Path) -> List[Artifact]:
    """List conforming test files under ``test_dir`` in ascending step order.

    A missing directory yields an empty list. Files are visited in name order
    before the stable step sort, so equal keys (``1.test.js`` vs ``1.test.ts``)
    keep a deterministic order.
    """
    if not test_dir.is_dir():
        LOGGER.info("Test directory %s not found; reporting no steps", test_dir)
        return []

    artifacts: List[Artifact] = []
    for entry in sorted(test_dir.iterdir(), key=lambda item: item.name):
        if not entry.is_file():
            continue
        parsed = parse_identifier(entry.name)
        if parsed is None:
            continue
        major, minor = parsed
        artifacts.append(Artifact(identifier=entry.name, major=major, minor=minor, path=entry.resolve()))

    artifacts.sort(key=lambda artifact: artifact.sort_key)
    LOGGER.debug("Discovered %d numbered tests in %s", len(artifacts), test_dir)
    return artifacts


__all__ = ["ARTIFACT_PATTERN", "Artifact", "discover_artifacts", "parse_identifier", "step_key"]
