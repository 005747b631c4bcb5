"""
Result tree for one ingestion run.

Every filesystem entry becomes exactly one node class; the class *is* the
classification, and each class only carries the fields that make sense
for it (only ``FileNode`` has content, only ``DirectoryNode`` has children).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Iterator, List, Optional, Sequence, Tuple


class NodeKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    NOT_TEXT = "non-text"
    TOO_LARGE = "too-large"
    EXCLUDED = "excluded"


@dataclass(frozen=True)
class Node:
    name: str
    path: str
    full_path: str
    size: int = 0
    mode: int = 0
    depth: int = 0

    kind: ClassVar[NodeKind]

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY


@dataclass(frozen=True)
class FileNode(Node):
    """A regular file accepted by the filters.

    ``content`` is ``None`` when the entry could not be stat'ed or read; the
    reason is kept in ``error``.
    """

    content: Optional[str] = None
    error: Optional[str] = None

    kind: ClassVar[NodeKind] = NodeKind.FILE


@dataclass(frozen=True)
class NotTextNode(Node):
    error: Optional[str] = None

    kind: ClassVar[NodeKind] = NodeKind.NOT_TEXT


@dataclass(frozen=True)
class TooLargeNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.TOO_LARGE


@dataclass(frozen=True)
class SymlinkNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.SYMLINK


@dataclass(frozen=True)
class ExcludedNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.EXCLUDED


@dataclass(frozen=True)
class DirectoryNode(Node):
    """A directory; ``size`` is always the sum of its children's sizes."""

    children: Tuple[Node, ...] = field(default_factory=tuple)
    error: Optional[str] = None

    kind: ClassVar[NodeKind] = NodeKind.DIRECTORY

    def __post_init__(self) -> None:
        children = tuple(self.children)
        object.__setattr__(self, "children", children)
        object.__setattr__(self, "size", sum(c.size for c in children))


def iter_nodes(node: Node) -> Iterator[Node]:
    """Pre-order traversal of *node* and everything below it."""
    yield node
    if isinstance(node, DirectoryNode):
        for child in node.children:
            yield from iter_nodes(child)


def sort_nodes(nodes: Sequence[Node]) -> List[Node]:
    """Directories first, then case-insensitive name order (stable)."""
    return sorted(nodes, key=lambda n: (not n.is_dir, n.name.lower()))
