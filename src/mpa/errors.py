"""mpa exception hierarchy.

Shared across discovery, templating, staging, and the dev server so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class MpaError(Exception):
    """Base for all mpa-specific errors."""


class ConfigurationError(MpaError):
    """Raised when plugin or host configuration is invalid."""


class TemplateReadError(MpaError):
    """A template file could not be read from disk."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Failed to read template {path}{detail}")


class RenderError(MpaError):
    """A template failed to compile or render."""


class MetadataError(MpaError):
    """A page's ``info.json`` could not be read or parsed."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid page metadata {path}{detail}")


@dataclass(frozen=True, slots=True)
class HTTPError(MpaError):
    """An error that maps directly to an HTTP status code.

    Raised by the terminal dev-server handler. The ASGI handler catches
    these and sends a plain-text response with the status.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — neither a page nor a static file matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
