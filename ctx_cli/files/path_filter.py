"""Glob-pattern exclusion for directory expansion.

Pattern syntax:
- ``*`` matches any run of characters inside one path segment
- ``**`` as a whole segment matches zero or more segments
- ``?`` and ``[...]`` classes behave as in fnmatch, within one segment

Example patterns:
- "**/node_modules/**" - a node_modules directory and everything below it
- "**/.env.*" - any file named .env.<something>
- "*.lock" - matched against the base name, so any lock file
"""

from __future__ import annotations

import logging
import posixpath
from fnmatch import fnmatchcase
from functools import lru_cache

from ..models import ExcludeRule

logger = logging.getLogger(__name__)

GLOBSTAR = "**"


@lru_cache(maxsize=256)
def _split_pattern(pattern: str) -> tuple[str, ...]:
    return tuple(pattern.replace("\\", "/").split("/"))


def _match_segments(pattern: tuple[str, ...], parts: tuple[str, ...]) -> bool:
    if not pattern:
        return not parts

    head = pattern[0]
    if head == GLOBSTAR:
        rest = pattern[1:]
        # Collapse consecutive globstars
        while rest and rest[0] == GLOBSTAR:
            rest = rest[1:]
        if not rest:
            return True
        return any(_match_segments(rest, parts[i:]) for i in range(len(parts) + 1))

    if not parts:
        return False
    if not fnmatchcase(parts[0], head):
        return False
    return _match_segments(pattern[1:], parts[1:])


def matches(pattern: str, path: str) -> bool:
    """Check a single glob pattern against a slash-separated path.

    A malformed pattern never raises; it simply fails to match.
    """
    if not pattern:
        return False
    parts = tuple(path.replace("\\", "/").split("/"))
    try:
        return _match_segments(_split_pattern(pattern), parts)
    except (RecursionError, ValueError) as e:
        logger.debug(f"Pattern {pattern!r} could not be evaluated against {path}: {e}")
        return False


class PathFilter:
    """Decides whether a path is excluded by an exclude rule.

    Contract:
    - Inputs: an ExcludeRule (name + patterns)
    - Outputs: should_exclude(path) -> bool
    - Side effects: None

    Each pattern is tried against the full path and against the base
    name; a hit on any pattern excludes the path.
    """

    def __init__(self, rule: ExcludeRule | None) -> None:
        self.rule = rule
        self.patterns: list[str] = list(rule.patterns) if rule else []

    def should_exclude(self, path: str) -> bool:
        if not self.patterns:
            return False

        base = posixpath.basename(path.replace("\\", "/").rstrip("/"))
        for pattern in self.patterns:
            if matches(pattern, path) or matches(pattern, base):
                logger.debug(f"Path {path} matches exclude pattern: {pattern}")
                return True
        return False


def should_exclude(path: str, rule: ExcludeRule | None) -> bool:
    """Convenience wrapper around ``PathFilter(rule).should_exclude(path)``."""
    return PathFilter(rule).should_exclude(path)
