"""
Render a :class:`~pathdigest.ingest.Result` as text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .core import IngestionOptions
from .ingest import Result
from .nodes import DirectoryNode, FileNode, Node, NodeKind

FILE_SEPARATOR = "=" * 48 + "\n"


@dataclass(frozen=True)
class Digest:
    summary: str
    tree: str
    content: str
    token_count: int

    def text(self) -> str:
        return self.tree + "\n" + self.content


def human_size(n: int) -> str:
    unit = 1024
    if n < unit:
        return f"{n} B"
    div, exp = unit, 0
    rest = n // unit
    while rest >= unit:
        div *= unit
        exp += 1
        rest //= unit
    return f"{n / div:.1f} {'KMGTPE'[exp]}B"


def estimate_tokens(text: str) -> int:
    # Rough placeholder, ~4 characters per token.
    return len(text) // 4


def _display_name(node: Node) -> str:
    name = node.name
    kind = node.kind
    if kind is NodeKind.DIRECTORY:
        name += "/"
    elif kind is NodeKind.SYMLINK:
        name += " (symlink)"
    elif kind is NodeKind.NOT_TEXT:
        name += " (non-text)"
    elif kind is NodeKind.TOO_LARGE:
        name += f" (too large: {human_size(node.size)})"
    elif kind is NodeKind.EXCLUDED:
        name += " (excluded)"
    error = getattr(node, "error", None)
    if error:
        name += f" (error: {error})"
    return name


def _tree_lines(node: Node, prefix: str, is_last: bool, out: List[str]) -> None:
    connector = "└── " if is_last else "├── "
    out.append(f"{prefix}{connector}{_display_name(node)}")
    if isinstance(node, DirectoryNode) and node.children:
        child_prefix = prefix + ("    " if is_last else "│   ")
        last = len(node.children) - 1
        for idx, child in enumerate(node.children):
            _tree_lines(child, child_prefix, idx == last, out)


def build_tree(root: Node) -> str:
    if isinstance(root, DirectoryNode):
        lines = ["Directory structure:"]
        _tree_lines(root, "", True, lines)
    else:
        lines = ["File processed:", f"└── {_display_name(root)}"]
    return "\n".join(lines) + "\n"


def _shown_path(node: Node) -> str:
    # the root of a single-file run has path "."
    return node.path if node.depth else node.name


def _content_blocks(node: Node, out: List[str]) -> None:
    if isinstance(node, FileNode):
        if node.content:
            out.append(FILE_SEPARATOR)
            out.append(f"File: {_shown_path(node)}\n")
            out.append(FILE_SEPARATOR)
            out.append(node.content)
            if not node.content.endswith("\n"):
                out.append("\n")
            out.append("\n")
    elif node.kind in (NodeKind.NOT_TEXT, NodeKind.TOO_LARGE):
        out.append(FILE_SEPARATOR)
        out.append(f"File: {_shown_path(node)} ({node.kind.value} - content not included)\n")
        out.append(FILE_SEPARATOR)
        out.append("\n\n")
    elif isinstance(node, DirectoryNode):
        for child in node.children:
            _content_blocks(child, out)


def build_content(root: Node) -> str:
    out: List[str] = []
    _content_blocks(root, out)
    return "".join(out)


def build_summary(result: Result, options: IngestionOptions) -> str:
    root = result.root
    lines: List[str] = []
    if root.is_dir:
        lines.append(f"Source Directory: {options.source}")
    else:
        lines.append(f"Source File: {options.source}")
    if result.git_info is not None:
        lines.append(f"Repository: {result.git_info.display_name()}")
        if result.git_info.branch:
            lines.append(f"Branch: {result.git_info.branch}")
        if result.git_info.commit:
            lines.append(f"Commit: {result.git_info.commit}")
    if options.include_patterns:
        lines.append(f"Include Patterns: {', '.join(options.include_patterns)}")
    if options.exclude_patterns:
        lines.append(f"Exclude Patterns: {', '.join(options.exclude_patterns)}")
    if options.max_file_size > 0:
        lines.append(f"Max File Size: {human_size(options.max_file_size)}")

    if root.is_dir:
        lines.append(f"Files analyzed: {result.total_files}")
        lines.append(f"Total size: {human_size(result.total_size)}")
    else:
        lines.append(f"File: {root.name}")
        lines.append(f"Size: {human_size(root.size)}")
        if isinstance(root, FileNode):
            line_count = (root.content or "").count("\n") + 1
            lines.append(f"Lines: {line_count}")
        elif root.kind is NodeKind.EXCLUDED:
            lines.append("Status: excluded")
        else:
            lines.append(f"Status: {root.kind.value}")
    return "\n".join(lines) + "\n"


def format_result(result: Result, options: IngestionOptions) -> Digest:
    tree = build_tree(result.root)
    content = build_content(result.root)
    summary = build_summary(result, options)
    tokens = estimate_tokens(tree + "\n" + content)
    summary += f"Estimated tokens: {tokens}\n"
    return Digest(summary=summary, tree=tree, content=content, token_count=tokens)
