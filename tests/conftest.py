from pathlib import Path
from typing import Dict, Union

import pytest


@pytest.fixture
def make_tree(tmp_path):
    """Create files below a fresh ``project`` dir from a {relpath: content} map.

    A key ending in ``/`` creates an empty directory.
    """

    def _make(files: Dict[str, Union[str, bytes, None]], root_name: str = "project") -> Path:
        root = tmp_path / root_name
        root.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            if rel.endswith("/"):
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content or "", encoding="utf-8")
        return root

    return _make
