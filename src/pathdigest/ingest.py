"""
Top-level entry point: resolve the source, fetch it if remote, walk it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

from . import console
from .core import IngestionOptions
from .nodes import Node
from .remote import GitFetcher, GitURLParts, RemoteFetcher, is_likely_git_url, parse_git_url
from .walker import walk


@dataclass(frozen=True)
class Result:
    root: Node
    total_files: int
    total_size: int
    git_info: Optional[GitURLParts] = None


def is_remote_source(source: str) -> bool:
    """Anything that exists locally is local, even when it looks like ``user/repo``."""
    if os.path.exists(source):
        return False
    return is_likely_git_url(source)


def process_local_path(options: IngestionOptions) -> Result:
    walked = walk(options.source, options)
    return Result(walked.root, walked.total_files, walked.total_size)


def process_git_url(
    options: IngestionOptions,
    fetcher: Optional[RemoteFetcher] = None,
) -> Result:
    console.info(f"Processing Git URL: {options.source}", options.verbose)
    parts = parse_git_url(options.source)
    if options.branch:
        parts = replace(parts, branch=options.branch, commit="")

    fetcher = fetcher or GitFetcher(verbose=options.verbose)
    with fetcher.fetch(parts) as local_path:
        result = process_local_path(options.with_source(str(local_path)))

    root = result.root
    if root.is_dir:
        root = replace(root, name=parts.display_name())
    return replace(result, root=root, git_info=parts)


def process_source(
    options: IngestionOptions,
    fetcher: Optional[RemoteFetcher] = None,
) -> Result:
    """Produce the node tree and totals for ``options.source``.

    Raises a :class:`~pathdigest.core.PathdigestError` subclass only for
    failures that abort the whole run.
    """
    if is_remote_source(options.source):
        return process_git_url(options, fetcher)
    return process_local_path(options)
