"""Virtual page routing for the dev server.

Pages are never written to disk in development.  ``PageRouter``
matches the request path against the current registry and renders the
page on demand; ``PageIndex`` answers ``/`` with a link list when no
page claimed it.

Both read the registry through a provider callable, so a rebuild that
swaps the registry is seen by the next request without reinstalling
middleware.
"""

import html
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from mpa.errors import MpaError
from mpa.http.request import Request, strip_path
from mpa.http.response import Response
from mpa.middleware.protocol import Next
from mpa.pages.types import Page, PageRegistry
from mpa.templating.cache import TemplateCache
from mpa.templating.integration import (
    HtmlTransform,
    apply_transforms,
    entry_url,
    inject_entry_script,
    render_page,
)

logger = logging.getLogger("mpa.router")

# Page served at "/" when no page name matches it
INDEX_PAGE = "index"


def match_page(pages: PageRegistry, path: str) -> Page | None:
    """Find the page a request path refers to.

    Scans the registry in iteration order; the first page whose name
    variants include *path* wins.  ``/`` falls back to the page named
    ``index``.
    """
    for page in pages.values():
        if path in page.url_variants():
            return page
    if path == "/":
        return pages.get(INDEX_PAGE)
    return None


class PageRouter:
    """Middleware that renders discovered pages for HTML requests.

    Requests that match no page, or that do not accept ``text/html``,
    fall through to the next handler.  A page that fails to render is
    logged and also falls through; the router never produces an error
    response itself.

    Usage::

        server.use(PageRouter(lambda: plugin.pages, cache, root, base="/app/"))
    """

    __slots__ = ("_base", "_cache", "_pages", "_root", "_transforms")

    def __init__(
        self,
        pages: Callable[[], PageRegistry],
        cache: TemplateCache,
        root: str | Path,
        *,
        base: str = "/",
        transforms: Sequence[HtmlTransform] = (),
    ) -> None:
        self._pages = pages
        self._cache = cache
        self._root = Path(root).resolve()
        self._base = base or "/"
        self._transforms = tuple(transforms)

    async def __call__(self, request: Request, next: Next) -> Response:
        """Serve a virtual page or fall through."""
        path = strip_path(request.path)
        page = match_page(self._pages(), path)

        if page is None or not request.accepts_html:
            return await next(request)

        logger.info("Serving virtual page: %s for URL: %s", page.name, path)
        try:
            body = await self.render(page)
        except (MpaError, OSError, ValueError) as exc:
            logger.error("Failed to serve virtual page %s: %s", page.name, exc)
            return await next(request)

        return Response(body=body, content_type="text/html; charset=utf-8")

    async def render(self, page: Page) -> str:
        """Render *page* the way the dev server serves it."""
        body = await render_page(self._cache, page)
        body = await apply_transforms(
            body,
            self._transforms,
            {
                "page": page,
                "page_name": page.name,
                "filename": page.output_path,
                "is_build_mode": False,
            },
        )
        if page.entry_file is not None:
            src = await entry_url(self._root, page.entry_file, self._base)
            logger.debug("Injecting entry script: %s for page: %s", src, page.name)
            body = inject_entry_script(body, src)
        return body


class PageIndex:
    """Middleware that lists every page as a link at ``/``."""

    __slots__ = ("_pages",)

    def __init__(self, pages: Callable[[], PageRegistry]) -> None:
        self._pages = pages

    async def __call__(self, request: Request, next: Next) -> Response:
        if strip_path(request.path) != "/":
            return await next(request)

        logger.debug("Serving pages list endpoint")
        links = "".join(
            f'<a target="_self" href="/{html.escape(name, quote=True)}.html">'
            f"{html.escape(page.title)}</a><br/>"
            for name, page in self._pages().items()
        )
        return Response(body=links, content_type="text/html; charset=utf-8")
