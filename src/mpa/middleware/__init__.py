"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    PageRouter -- Render discovered pages on demand
    PageIndex -- Link list of every page at ``/``
    StaticFiles -- Serve project files (entry scripts, assets)
"""

from mpa.middleware.pages import PageIndex, PageRouter
from mpa.middleware.protocol import Middleware, Next
from mpa.middleware.static import StaticFiles

__all__ = [
    "Middleware",
    "Next",
    "PageIndex",
    "PageRouter",
    "StaticFiles",
]
