"""
Recursive tree walker.

The walk is depth-first and builds every subtree completely before the
parent directory node is created, so directory sizes and the run totals are
folded bottom-up and nodes never change after construction.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import pathspec

from . import console
from .core import IngestionOptions, PathdigestError, SourceNotFoundError, load_gitignore
from .matching import ROOT, matches, should_descend
from .nodes import (
    DirectoryNode,
    ExcludedNode,
    FileNode,
    Node,
    NotTextNode,
    SymlinkNode,
    TooLargeNode,
    sort_nodes,
)

MAX_DEPTH = 20
TEXT_PROBE_BYTES = 1024


@dataclass(frozen=True)
class WalkResult:
    root: Node
    total_files: int
    total_size: int


# File helpers
def is_text_file(path: str) -> bool:
    """Sniff the first 1 KiB: any NUL byte means binary. Empty files are text."""
    with open(path, "rb") as fh:
        head = fh.read(TEXT_PROBE_BYTES)
    return b"\0" not in head


def read_text(path: str) -> str:
    with open(path, "rb") as fh:
        raw = fh.read()
    return raw.decode("utf-8", errors="replace")


def classify_file(
    name: str,
    rel: str,
    full_path: str,
    size: int,
    mode: int,
    depth: int,
    max_file_size: int,
) -> Node:
    """Turn an accepted regular file into a File, NotText or TooLarge node."""
    common = dict(name=name, path=rel, full_path=full_path, size=size, mode=mode, depth=depth)

    if max_file_size > 0 and size > max_file_size:
        return TooLargeNode(**common)

    try:
        text_like = is_text_file(full_path)
    except OSError as e:
        return NotTextNode(**common, error=f"error checking if file is text: {e}")
    if not text_like:
        return NotTextNode(**common)

    try:
        content = read_text(full_path)
    except OSError as e:
        return FileNode(**common, error=f"error reading file content: {e}")
    return FileNode(**common, content=content)


# Filtering
class _Filter:
    """Include/exclude decisions for one walk."""

    def __init__(
        self,
        options: IngestionOptions,
        gitignore: Optional[pathspec.PathSpec] = None,
    ) -> None:
        self.excludes = options.exclude_patterns
        self.includes = options.include_patterns
        self.gitignore = gitignore

    def excluded(self, rel: str, is_dir: bool) -> bool:
        if matches(rel, is_dir, self.excludes):
            return True
        if self.gitignore is not None:
            return self.gitignore.match_file(rel + "/" if is_dir else rel)
        return False

    def included(self, rel: str, is_dir: bool) -> bool:
        return bool(self.includes) and matches(rel, is_dir, self.includes)

    def accepts(self, excluded: bool, included: bool) -> bool:
        # An include match always wins; with includes present nothing else gets in.
        if self.includes:
            return included
        return not excluded

    def enters(self, rel: str, excluded: bool, included: bool) -> bool:
        if excluded and not included:
            return False
        if self.includes and not included:
            return should_descend(rel, self.includes)
        return True


# Walk
def _child_rel(parent_rel: str, name: str) -> str:
    return name if parent_rel == ROOT else f"{parent_rel}/{name}"


def _walk_directory(
    name: str,
    rel: str,
    full_path: str,
    mode: int,
    depth: int,
    options: IngestionOptions,
    flt: _Filter,
) -> Tuple[DirectoryNode, int, int]:
    """Build the node for one directory; returns (node, files, bytes) for its subtree."""
    common = dict(name=name, path=rel, full_path=full_path, mode=mode, depth=depth)

    if depth >= MAX_DEPTH:
        console.warn(f"Maximum directory depth ({MAX_DEPTH}) reached at {full_path}")
        return DirectoryNode(**common), 0, 0

    try:
        with os.scandir(full_path) as it:
            entries = list(it)
    except OSError as e:
        return DirectoryNode(**common, error=f"failed to read directory {full_path}: {e}"), 0, 0

    children: List[Node] = []
    total_files = 0
    total_size = 0

    for entry in entries:
        child_rel = _child_rel(rel, entry.name)
        child_depth = depth + 1

        try:
            st = entry.stat(follow_symlinks=False)
        except OSError as e:
            console.warn(f"could not get info for {entry.path}: {e}")
            children.append(
                FileNode(
                    name=entry.name,
                    path=child_rel,
                    full_path=entry.path,
                    depth=child_depth,
                    error=f"could not get file info: {e}",
                )
            )
            continue

        is_dir = stat.S_ISDIR(st.st_mode)
        excluded = flt.excluded(child_rel, is_dir)
        included = flt.included(child_rel, is_dir)

        if is_dir:
            if not flt.enters(child_rel, excluded, included):
                continue
            child, files, size = _walk_directory(
                entry.name, child_rel, entry.path, st.st_mode, child_depth, options, flt
            )
            total_files += files
            total_size += size
            children.append(child)
            continue

        if not flt.accepts(excluded, included):
            continue

        if stat.S_ISREG(st.st_mode):
            child = classify_file(
                entry.name,
                child_rel,
                entry.path,
                st.st_size,
                st.st_mode,
                child_depth,
                options.max_file_size,
            )
            total_files += 1
            total_size += child.size
            children.append(child)
        elif stat.S_ISLNK(st.st_mode):
            children.append(
                SymlinkNode(
                    name=entry.name,
                    path=child_rel,
                    full_path=entry.path,
                    size=st.st_size,
                    mode=st.st_mode,
                    depth=child_depth,
                )
            )
        # sockets, fifos and devices are left out

    return DirectoryNode(**common, children=tuple(sort_nodes(children))), total_files, total_size


def _walk_single_file(
    full_path: str, st: os.stat_result, options: IngestionOptions
) -> WalkResult:
    name = os.path.basename(full_path)
    flt = _Filter(options)
    excluded = flt.excluded(name, False)
    included = flt.included(name, False)

    if not flt.accepts(excluded, included):
        root = ExcludedNode(
            name=name, path=ROOT, full_path=full_path, size=st.st_size, mode=st.st_mode
        )
        return WalkResult(root, 0, 0)

    root = classify_file(name, ROOT, full_path, st.st_size, st.st_mode, 0, options.max_file_size)
    return WalkResult(root, 1, root.size)


def walk(root_path: str, options: IngestionOptions) -> WalkResult:
    """Walk *root_path* (a directory or a single file) according to *options*.

    Only a missing or unreadable root raises; problems further down are
    recorded on the affected nodes.
    """
    full_path = os.path.abspath(root_path)
    try:
        st = os.stat(full_path)
    except FileNotFoundError:
        raise SourceNotFoundError(f"source path does not exist: {full_path}")
    except OSError as e:
        raise SourceNotFoundError(f"failed to stat source path {full_path}: {e}")

    if stat.S_ISREG(st.st_mode):
        return _walk_single_file(full_path, st, options)
    if not stat.S_ISDIR(st.st_mode):
        raise PathdigestError(f"source is neither a file nor a directory: {full_path}")

    gitignore = load_gitignore(Path(full_path)) if options.use_gitignore else None
    console.info(f"Scanning {full_path} …", options.verbose)
    root, total_files, total_size = _walk_directory(
        os.path.basename(full_path) or full_path,
        ROOT,
        full_path,
        st.st_mode,
        0,
        options,
        _Filter(options, gitignore),
    )
    return WalkResult(root, total_files, total_size)
