"""Page rendering on top of the template cache.

Shared by the dev router and the build staging pipeline so both modes
produce the same HTML for a page: template resolution, compilation
with page data, and entry-script injection.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Sequence
from pathlib import Path
from typing import Any, Protocol

import anyio

from mpa.pages.types import Page
from mpa.templating.cache import TemplateCache

logger = logging.getLogger("mpa.templating")

# Skeleton used when a page has no template file
DEFAULT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{ title }}</title>
</head>
<body>
  <div id="app"></div>
</body>
</html>"""

# Injection point for entry scripts
BODY_CLOSE = "</body>"


class HtmlTransform(Protocol):
    """A post-render HTML hook applied to dev-served pages.

    Accepts sync or async ``transform`` methods::

        class Banner:
            name = "banner"

            def transform(self, html: str, ctx: dict[str, Any]) -> str:
                return html.replace("<body>", "<body><p>dev</p>", 1)
    """

    name: str

    def transform(self, html: str, ctx: dict[str, Any]) -> str | Awaitable[str]: ...


async def load_template(cache: TemplateCache, page: Page) -> str:
    """Return the page's template text, or the skeleton when it has none."""
    if page.template is not None and await anyio.Path(page.template).is_file():
        return await cache.get_template_content(page.template)
    logger.debug("Using default template for %s", page.name)
    return DEFAULT_TEMPLATE


async def render_page(cache: TemplateCache, page: Page) -> str:
    """Render *page* to HTML without the entry script.

    Raises:
        TemplateReadError: The page template cannot be read.
        RenderError: The page template is invalid.
    """
    template = await load_template(cache, page)
    logger.debug("Compiling template for page: %s", page.name)
    return cache.render(template, page.data)


def script_tag(src: str) -> str:
    return f'<script type="module" src="{src}"></script>'


def inject_entry_script(html: str, src: str) -> str:
    """Insert a module script before ``</body>``, or append it."""
    tag = script_tag(src)
    if BODY_CLOSE in html:
        return html.replace(BODY_CLOSE, f"{tag}\n{BODY_CLOSE}", 1)
    return f"{html}\n{tag}"


async def entry_url(root: Path, entry_file: Path, base: str = "/") -> str:
    """URL of *entry_file* relative to *root*, prefixed by *base*."""
    entry = await anyio.Path(entry_file).resolve()
    relative = Path(entry).relative_to(await anyio.Path(root).resolve()).as_posix()
    prefix = base if base.endswith("/") else f"{base}/"
    return f"{prefix}{relative}"


async def apply_transforms(
    html: str,
    transforms: Sequence[HtmlTransform],
    ctx: dict[str, Any],
) -> str:
    """Run *html* through every transform in order.

    A transform that raises is logged and skipped; the HTML produced so
    far is passed on unchanged.
    """
    for transformer in transforms:
        name = getattr(transformer, "name", None) or "unnamed"
        try:
            result = transformer.transform(html, ctx)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.exception("Error in transformer %s for %s", name, ctx.get("page_name") or "page")
            continue
        html = result
        logger.debug("Applied transformer: %s", name)
    return html
