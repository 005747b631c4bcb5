"""
Writing the rendered digest to disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

from . import console
from .core import OutputError
from .formatting import Digest


def write_digest(digest: Digest, out_path: Path, verbose: bool = False) -> Path:
    """Write tree + file contents to *out_path*, creating parent dirs as needed."""
    try:
        out_path = out_path.resolve()
    except (OSError, RuntimeError) as e:
        raise OutputError(f"Could not resolve output path '{out_path}': {e}")

    if not out_path.parent.exists():
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Could not create directory '{out_path.parent}': {e}")

    console.info(f"Writing to {out_path} …", verbose)
    try:
        with out_path.open(
            "w", encoding="utf-8", errors="backslashreplace", newline="\n"
        ) as out_fh:
            out_fh.write(digest.text())
    except OSError as e:
        raise OutputError(f"Could not write to output file '{out_path}': {e}")
    return out_path


def write_stream(text: str, stream: TextIO) -> None:
    """Write *text* to a console stream; names the stream cannot encode are escaped."""
    encoding = getattr(stream, "encoding", None) or "utf-8"
    stream.write(text.encode(encoding, "backslashreplace").decode(encoding))
