"""
CLI entrypoint for pathdigest.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from . import __version__, console
from .core import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_OUTPUT_FILE,
    IngestionOptions,
    PathdigestError,
    load_pattern_file,
)
from .formatting import format_result
from .ingest import is_remote_source, process_source
from .output import write_digest, write_stream
from .remote import GitFetcher, parse_git_url


def _split_patterns(values: Optional[List[str]]) -> List[str]:
    """Flatten repeated and comma-separated pattern flags."""
    patterns: List[str] = []
    for value in values or []:
        patterns.extend(p.strip() for p in value.split(",") if p.strip())
    return patterns


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="pathdigest",
        description=(
            "Generate a prompt-friendly text digest of a Git repository, "
            "a local directory or a single file."
        ),
    )
    p.add_argument("source", help="Local path, Git URL or user/repo slug")
    p.add_argument(
        "-o",
        "--output",
        default=DEFAULT_OUTPUT_FILE,
        help=f"Output file, '-' for stdout (default: {DEFAULT_OUTPUT_FILE})",
    )
    p.add_argument(
        "-s",
        "--max-size",
        type=int,
        default=DEFAULT_MAX_FILE_SIZE,
        help="Maximum file size in bytes to include, 0 for no limit (default 10 MiB)",
    )
    p.add_argument(
        "-e",
        "--exclude-pattern",
        action="append",
        metavar="PATTERN",
        help="Comma-separated patterns to exclude (adds to the defaults)",
    )
    p.add_argument(
        "-i",
        "--include-pattern",
        action="append",
        metavar="PATTERN",
        help="Comma-separated patterns to include (overrides excludes)",
    )
    p.add_argument(
        "--exclude-from",
        type=Path,
        metavar="FILE",
        help="File with extra exclude patterns (one per line)",
    )
    p.add_argument(
        "--gitignore",
        action="store_true",
        help="Also skip whatever the source's .gitignore ignores",
    )
    p.add_argument("-b", "--branch", help="Branch to clone (Git sources only)")
    p.add_argument(
        "--list-branches",
        action="store_true",
        help="List the remote branches of a Git source and exit",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"pathdigest {__version__}")
    ns = p.parse_args(argv)
    if ns.max_size < 0:
        p.error("--max-size must be >= 0")
    return ns


def _list_branches(source: str, verbose: bool = False) -> None:
    parts = parse_git_url(source)
    for branch in GitFetcher(verbose=verbose).list_branches(parts.repo_url):
        print(branch)


def run(ns: argparse.Namespace) -> None:
    excludes = _split_patterns(ns.exclude_pattern)
    if ns.exclude_from:
        excludes += load_pattern_file(ns.exclude_from.resolve())
        console.info(f"Loaded extra patterns from {ns.exclude_from}", ns.verbose)

    if ns.list_branches:
        _list_branches(ns.source, ns.verbose)
        return

    options = IngestionOptions.build(
        ns.source,
        max_file_size=ns.max_size,
        exclude_patterns=excludes,
        include_patterns=_split_patterns(ns.include_pattern),
        branch=ns.branch,
        use_gitignore=ns.gitignore,
        verbose=ns.verbose,
    )

    console.info(f"Processing source: {options.source}", ns.verbose)
    if options.branch and is_remote_source(options.source):
        console.info(f"Targeting branch: {options.branch}", ns.verbose)

    result = process_source(options)
    digest = format_result(result, options)

    if ns.output and ns.output != "-":
        out_path = write_digest(digest, Path(ns.output), ns.verbose)
        console.success(f"Digest written to: {out_path}")
    else:
        write_stream(digest.text(), sys.stdout)

    print("\n--- Summary ---", file=sys.stderr)
    write_stream(digest.summary, sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> None:
    try:
        ns = _parse_args(argv)
        run(ns)
    except PathdigestError as e:
        console.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        console.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
