"""HTTP primitives for the dev server: headers, request, response."""

from mpa.http.headers import Headers
from mpa.http.request import Request
from mpa.http.response import Response

__all__ = ["Headers", "Request", "Response"]
