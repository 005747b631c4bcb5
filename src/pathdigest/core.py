"""
Core configuration for pathdigest: errors, the default deny-list and the
options that drive a single ingestion run.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import pathspec

# Exceptions
class PathdigestError(Exception): ...
class SourceNotFoundError(PathdigestError): ...
class SourceParseError(PathdigestError): ...
class FetchError(PathdigestError): ...
class ConfigFileError(PathdigestError): ...
class OutputError(PathdigestError): ...

# Defaults
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_OUTPUT_FILE = "pathdigest_digest.txt"

DEFAULT_EXCLUDE_PATTERNS: Tuple[str, ...] = (
    # Version control
    ".git/",
    ".svn/",
    ".hg/",
    ".cvs/",
    ".DS_Store",
    # Dependencies and build output
    "node_modules/",
    "bower_components/",
    "vendor/",
    "target/",
    "build/",
    "dist/",
    "bin/",
    "obj/",
    "pkg/",
    # Python
    "__pycache__/",
    "*.pyc",
    "*.pyo",
    "*.pyd",
    ".pytest_cache/",
    ".tox/",
    ".mypy_cache/",
    ".ruff_cache/",
    "*.egg-info/",
    "*.egg-info",  # directory patterns are literal prefixes, so the glob needs a name form too
    "venv/",
    ".venv/",
    "env/",
    "ENV/",
    "pip-wheel-metadata/",
    # JavaScript / Node
    "package-lock.json",
    "yarn.lock",
    ".npm/",
    ".yarn/",
    "*.log",
    "coverage/",
    ".env",
    ".next/",
    "*.lock",
    "*.lockb",
    # IDEs and editors
    ".idea/",
    ".vscode/",
    ".vs/",
    "*.sublime-project",
    "*.sublime-workspace",
    "*.suo",
    "*.user",
    "*.userosscache",
    "*.sln.docstates",
    # Other
    "Thumbs.db",
    "desktop.ini",
    "terraform.tfstate*",  # may hold secrets
    ".terraform/",
    "*.tfvars",
    "crash.dump",
    # Our own output
    "digest.txt",
    DEFAULT_OUTPUT_FILE,
)


def merge_patterns(*groups: Iterable[str]) -> Tuple[str, ...]:
    """Concatenate pattern groups, dropping blanks and duplicates (first wins)."""
    seen: List[str] = []
    for group in groups:
        for pattern in group:
            pattern = pattern.strip()
            if pattern and pattern not in seen:
                seen.append(pattern)
    return tuple(seen)


@dataclass(frozen=True)
class IngestionOptions:
    """Immutable configuration for one walk.

    ``exclude_patterns`` already contains the default deny-list; build
    instances through :meth:`build` unless you really want to start from an
    empty exclude set.
    """

    source: str
    max_file_size: int = 0
    exclude_patterns: Tuple[str, ...] = ()
    include_patterns: Tuple[str, ...] = ()
    branch: Optional[str] = None
    use_gitignore: bool = False
    verbose: bool = False

    @classmethod
    def build(
        cls,
        source: str,
        *,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        exclude_patterns: Iterable[str] = (),
        include_patterns: Iterable[str] = (),
        branch: Optional[str] = None,
        use_gitignore: bool = False,
        verbose: bool = False,
        defaults: Iterable[str] = DEFAULT_EXCLUDE_PATTERNS,
    ) -> "IngestionOptions":
        if max_file_size < 0:
            raise ValueError("max_file_size must be >= 0")
        return cls(
            source=source,
            max_file_size=max_file_size,
            exclude_patterns=merge_patterns(defaults, exclude_patterns),
            include_patterns=merge_patterns(include_patterns),
            branch=branch or None,
            use_gitignore=use_gitignore,
            verbose=verbose,
        )

    def with_source(self, source: str) -> "IngestionOptions":
        return replace(self, source=source)


# Pattern files
def load_pattern_file(config_path: Path) -> List[str]:
    """Read newline-separated patterns, skipping blanks and ``#`` comments."""
    if not config_path.exists():
        raise ConfigFileError(f"Config file '{config_path}' does not exist")
    if not config_path.is_file():
        raise ConfigFileError(f"'{config_path}' is not a file")
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            return [
                ln.strip()
                for ln in fh
                if ln.strip() and not ln.lstrip().startswith("#")
            ]
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read config file '{config_path}': {e}")


def load_gitignore(root: Path) -> Optional[pathspec.PathSpec]:
    """Compile ``root/.gitignore``; None when there is no such file."""
    gitignore_path = root / ".gitignore"
    if not gitignore_path.is_file():
        return None
    try:
        with gitignore_path.open("r", encoding="utf-8") as fh:
            return pathspec.PathSpec.from_lines("gitwildmatch", fh)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read '{gitignore_path}': {e}")
