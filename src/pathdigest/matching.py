"""
Include/exclude pattern matching.

Two kinds of pattern are understood:

* **directory patterns** end with ``/`` (``node_modules/``, ``src/api/``) and
  are matched by path prefix, so whole subtrees can be pruned without
  looking inside them;
* **name patterns** (``*.lock``, ``src/*.go``, ``Makefile``) are shell-style
  globs tried against the entry's base name and against its full relative
  path. ``*`` and ``?`` never cross a ``/`` and there is no ``**``.
"""

from __future__ import annotations

import posixpath
import re
from fnmatch import fnmatchcase
from typing import Iterable

ROOT = "."

_CARET_CLASS = re.compile(r"\[\^")


def normalize_path(path: str) -> str:
    """Force forward slashes and drop a leading ``./``."""
    normalized = path.replace("\\", "/")
    if normalized.startswith("./"):
        normalized = normalized[2:]
        if not normalized:
            return ROOT
    return normalized


def is_dir_pattern(pattern: str) -> bool:
    return pattern.endswith("/")


def _strip_pattern(pattern: str) -> str:
    clean = pattern[:-1] if pattern.endswith("/") else pattern
    if clean.startswith("./"):
        clean = clean[2:]
    elif clean == "." and pattern.endswith("/"):
        clean = ""
    return clean


def _base_name(path: str) -> str:
    if not path:
        return ROOT
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return posixpath.basename(stripped)


def _glob(pattern: str, path: str) -> bool:
    # Component-wise so that wildcards stay inside one path segment.
    # fnmatch only negates with "[!...]", so "[^...]" is rewritten to it.
    pattern_parts = _CARET_CLASS.sub("[!", pattern).split("/")
    path_parts = path.split("/")
    if len(pattern_parts) != len(path_parts):
        return False
    return all(fnmatchcase(name, pat) for pat, name in zip(pattern_parts, path_parts))


def _dir_prefix(path: str, is_dir: bool) -> str:
    if is_dir:
        return path.rstrip("/") + "/"
    parent = posixpath.dirname(path)
    return parent + "/"


def _prefix_related(dir_path: str, clean_pattern: str) -> bool:
    """True when *dir_path* is the patterned directory, an ancestor or a descendant."""
    candidate = dir_path.rstrip("/") + "/"
    target = clean_pattern + "/"
    return candidate.startswith(target) or target.startswith(candidate)


def matches(relative_path: str, is_dir: bool, patterns: Iterable[str]) -> bool:
    """Return True if *relative_path* matches any of *patterns*.

    A directory pattern matches a directory that is the patterned directory,
    one of its ancestors or one of its descendants, and matches a file that
    lives at or below the patterned directory. ``/`` and ``./`` only match
    the walk root itself.
    """
    normalized = normalize_path(relative_path)

    for pattern in patterns:
        dir_pattern = is_dir_pattern(pattern)
        clean = _strip_pattern(pattern)

        if not clean:
            if dir_pattern and normalized == ROOT:
                return True
            continue

        if dir_pattern:
            if is_dir:
                if normalized != ROOT and _prefix_related(normalized, clean):
                    return True
            elif _dir_prefix(normalized, False).startswith(clean + "/"):
                return True
            continue

        if _glob(clean, _base_name(normalized)) or _glob(clean, normalized):
            return True

    return False


def should_descend(relative_dir: str, include_patterns: Iterable[str]) -> bool:
    """Decide whether a directory may still hold something an include pattern wants.

    Only consulted when the directory itself did not match an include
    pattern. Any name pattern allows descent, since a glob can match a file
    at any depth.
    """
    normalized = normalize_path(relative_dir)

    for pattern in include_patterns:
        if not is_dir_pattern(pattern):
            return True
        clean = _strip_pattern(pattern)
        if clean and _prefix_related(normalized, clean):
            return True
    return False
