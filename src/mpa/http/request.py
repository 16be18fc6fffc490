"""Immutable HTTP request.

Frozen metadata for one dev-server request. The page router only
needs the method, path and ``Accept`` header; the body is never read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mpa.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path`` never carries a query string or fragment; ``query_string``
    keeps the raw query for logging and static-file handling.
    """

    method: str
    path: str
    headers: Headers
    query_string: str = ""
    http_version: str = "1.1"
    client: tuple[str, int] | None = None

    # -- Computed properties --

    @property
    def accept(self) -> str:
        """The raw ``Accept`` header, or an empty string."""
        return self.headers.get("accept") or ""

    @property
    def accepts_html(self) -> bool:
        """True when the client declares it accepts ``text/html``."""
        return "text/html" in self.accept

    @property
    def url(self) -> str:
        """Full request URL (path + query string)."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any]) -> Request:
        """Create a Request from an ASGI scope."""
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=strip_path(scope["path"]),
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b"").decode("latin-1"),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
        )


def strip_path(url: str) -> str:
    """Drop any query string and fragment from *url*."""
    return url.split("?", 1)[0].split("#", 1)[0]
