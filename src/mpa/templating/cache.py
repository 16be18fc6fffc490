"""Template content and compiled-output caches.

Two independent stores, both keyed by content identity rather than by
page:

- raw: template file path -> file text
- compiled: (template text, JSON of data in key order) -> rendered HTML

Neither store detects stale entries.  The owner clears both at every
registry rebuild, so an edited template is picked up on the next
discovery pass.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import anyio
from kida import Environment

from mpa.errors import RenderError, TemplateReadError

logger = logging.getLogger("mpa.templating")


def _data_key(data: Mapping[str, Any] | None) -> str:
    return json.dumps(dict(data or {}), default=str)


class TemplateCache:
    """Reads and renders page templates, memoizing both steps.

    Args:
        default_data: Process-wide render data merged into every context.
        template_options: Keyword arguments passed through to
            ``kida.Environment``.

    Usage::

        cache = TemplateCache(default_data={"site": "Docs"})
        text = await cache.get_template_content(page.template)
        html = cache.render(text, page.data)
    """

    __slots__ = ("_compiled", "_default_data", "_env", "_raw", "reads", "renders")

    def __init__(
        self,
        *,
        default_data: Mapping[str, Any] | None = None,
        template_options: Mapping[str, Any] | None = None,
    ) -> None:
        self._default_data = dict(default_data or {})
        self._env = Environment(**dict(template_options or {}))
        self._raw: dict[str, str] = {}
        self._compiled: dict[tuple[str, str], str] = {}
        # Storage reads and engine renders actually performed
        self.reads = 0
        self.renders = 0

    def __len__(self) -> int:
        return len(self._raw) + len(self._compiled)

    def clear(self) -> None:
        """Drop every cached template and rendered result."""
        self._raw.clear()
        self._compiled.clear()

    async def get_template_content(self, path: str | Path) -> str:
        """Return the text of the template at *path*.

        Raises:
            TemplateReadError: The file cannot be read.
        """
        key = str(path)
        cached = self._raw.get(key)
        if cached is not None:
            logger.debug("Using cached template: %s", key)
            return cached

        logger.debug("Reading template file: %s", key)
        try:
            content = await anyio.Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read template: %s, error: %s", key, exc)
            raise TemplateReadError(key, str(exc)) from exc

        self.reads += 1
        self._raw[key] = content
        return content

    def context_for(self, data: Mapping[str, Any] | None) -> dict[str, Any]:
        """Build the render context for one page.

        Page data is nested under ``info`` so it never overwrites a
        default-data key.  ``title`` always exists so the built-in
        skeleton renders without any data at all.
        """
        info = dict(data or {})
        context = dict(self._default_data)
        context.setdefault("title", info.get("title", ""))
        context["info"] = info
        return context

    def render(self, template: str, data: Mapping[str, Any] | None = None) -> str:
        """Render *template* with *data*, reusing an identical prior render.

        Raises:
            RenderError: The template cannot be compiled or rendered.
        """
        key = (template, _data_key(data))
        cached = self._compiled.get(key)
        if cached is not None:
            logger.debug("Using cached compiled template")
            return cached

        try:
            compiled = self._env.from_string(template)
            html = compiled.render(self.context_for(data))
        except Exception as exc:
            logger.error("Failed to compile template: %s", exc)
            raise RenderError(str(exc)) from exc

        self.renders += 1
        self._compiled[key] = html
        return html
