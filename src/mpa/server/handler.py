"""ASGI handler — translates ASGI scope/messages to mpa types.

The only component that touches raw HTTP ASGI messages directly.
Converts the scope to a Request, dispatches through the middleware
chain, and sends the Response back through ASGI send().
"""

import logging
from collections.abc import Sequence

from mpa._internal.asgi import Receive, Scope, Send
from mpa.errors import HTTPError, NotFound
from mpa.http.request import Request
from mpa.http.response import Response
from mpa.middleware.protocol import Middleware, Next
from mpa.server.sender import send_response

logger = logging.getLogger("mpa.server")


async def _not_found(request: Request) -> Response:
    """Innermost handler: nothing earlier in the chain claimed the path."""
    raise NotFound(f"No page or file for {request.path}")


def build_chain(middleware: Sequence[Middleware], inner: Next = _not_found) -> Next:
    """Wrap *middleware* around *inner*; the first entry runs first."""
    handler = inner
    for mw in reversed(middleware):
        outer = handler

        async def make_next(req: Request, _mw: Middleware = mw, _next: Next = outer) -> Response:
            return await _mw(req, _next)

        handler = make_next
    return handler


def error_response(exc: HTTPError) -> Response:
    """Plain-text response for an HTTP error."""
    response = Response(
        body=exc.detail or str(exc.status),
        status=exc.status,
        content_type="text/plain; charset=utf-8",
    )
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_request(
    scope: Scope,
    receive: Receive,  # noqa: ARG001
    send: Send,
    *,
    middleware: Sequence[Middleware],
) -> None:
    """Process a single HTTP request through the middleware chain."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(dict(scope))
    handler = build_chain(middleware)

    try:
        response = await handler(request)
    except HTTPError as exc:
        logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)
        response = error_response(exc)
    except Exception:
        logger.exception("500 %s %s", request.method, request.path)
        response = Response(
            body="Internal Server Error",
            status=500,
            content_type="text/plain; charset=utf-8",
        )

    await send_response(response, send, head=request.method == "HEAD")
