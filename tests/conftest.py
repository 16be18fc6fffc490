"""Shared fixtures: throwaway project trees under ``tmp_path``.

``make_page`` creates one page directory with an entry script and the
optional ``index.html`` / ``info.json`` sidecars, mirroring a real
``src/pages`` layout.
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

SKELETON = "<html><head><title>{{ title }}</title></head><body><main></main></body></html>"

type MakePage = Callable[..., Path]


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty project root with a ``src/pages`` directory."""
    root = tmp_path / "project"
    (root / "src" / "pages").mkdir(parents=True)
    return root


@pytest.fixture
def make_page(project: Path) -> MakePage:
    """Factory creating ``src/pages/<name>`` with an entry script."""

    def _make(
        name: str,
        *,
        entry: str | None = "index.js",
        template: str | None = None,
        info: dict[str, Any] | str | None = None,
    ) -> Path:
        page_dir = project / "src" / "pages" / name
        page_dir.mkdir(parents=True, exist_ok=True)
        if entry is not None:
            (page_dir / entry).write_text(f"console.log({name!r});\n")
        if template is not None:
            (page_dir / "index.html").write_text(template)
        if info is not None:
            raw = info if isinstance(info, str) else json.dumps(info)
            (page_dir / "info.json").write_text(raw)
        return page_dir

    return _make
