"""Project file serving middleware.

Serves page entry scripts and other assets straight from the project
root during development, so the ``<script type="module">`` tags the
page router injects resolve.

Falls through to the next handler for non-matching paths.
"""

import mimetypes
from pathlib import Path

import anyio

from mpa.http.request import Request
from mpa.http.response import Response
from mpa.middleware.protocol import Next

# ES modules must be served with a JavaScript MIME type
_MODULE_TYPES = {".js": "text/javascript", ".mjs": "text/javascript", ".ts": "text/javascript"}


class StaticFiles:
    """Middleware that serves files from a directory.

    Files are served for paths matching the configured prefix.
    Non-matching paths, directories and missing files fall through.

    Security: resolves symlinks and verifies the final path
    is within the configured directory to prevent path traversal.

    Usage::

        server.use(StaticFiles(directory=root, prefix="/"))
    """

    __slots__ = ("_cache_control", "_directory", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/",
        *,
        cache_control: str = "no-cache",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._cache_control = cache_control

        # Normalize prefix: ensure leading slash, strip trailing.
        # Root prefix "/" normalizes to "" (every path is a candidate).
        stripped = "/" + prefix.strip("/")
        self._prefix = stripped if stripped != "/" else ""

    async def __call__(self, request: Request, next: Next) -> Response:
        """Serve a file or fall through."""
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        path = request.path
        if self._prefix:
            if not path.startswith(self._prefix + "/"):
                return await next(request)
            relative = path[len(self._prefix) :].lstrip("/")
        else:
            relative = path.lstrip("/")

        if not relative:
            return await next(request)

        file_path = Path(await anyio.Path(self._directory / relative).resolve())
        if not file_path.is_relative_to(self._directory):
            return Response(body="Forbidden", status=403, content_type="text/plain; charset=utf-8")

        if not await anyio.Path(file_path).is_file():
            return await next(request)

        return await self._serve_file(file_path)

    async def _serve_file(self, file_path: Path) -> Response:
        """Read a file and build a response."""
        content_type = _MODULE_TYPES.get(file_path.suffix)
        if content_type is None:
            content_type, _ = mimetypes.guess_type(str(file_path))
        if content_type is None:
            content_type = "application/octet-stream"

        body = await anyio.Path(file_path).read_bytes()

        return Response(body=body, content_type=content_type).with_header(
            "Cache-Control", self._cache_control
        )
