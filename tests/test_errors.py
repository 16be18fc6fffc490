"""Tests for mpa.errors — exception hierarchy and error messages."""

import pytest

from mpa.errors import (
    ConfigurationError,
    HTTPError,
    MetadataError,
    MpaError,
    NotFound,
    RenderError,
    TemplateReadError,
)
from mpa.server.handler import error_response


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [ConfigurationError, HTTPError, MetadataError, RenderError, TemplateReadError],
    )
    def test_is_mpa_error(self, cls: type) -> None:
        assert issubclass(cls, MpaError)

    def test_not_found_is_http_error(self) -> None:
        assert issubclass(NotFound, HTTPError)


class TestMessages:
    def test_template_read_error(self) -> None:
        err = TemplateReadError("/p/index.html", "No such file")
        assert str(err) == "Failed to read template /p/index.html: No such file"
        assert err.path == "/p/index.html"
        assert err.reason == "No such file"

    def test_template_read_error_without_reason(self) -> None:
        assert str(TemplateReadError("/p/index.html")) == "Failed to read template /p/index.html"

    def test_metadata_error(self) -> None:
        err = MetadataError("/p/info.json", "Expecting value")
        assert str(err) == "Invalid page metadata /p/info.json: Expecting value"


class TestHTTPError:
    def test_str_with_detail(self) -> None:
        assert str(HTTPError(status=400, detail="Bad request")) == "400: Bad request"

    def test_str_without_detail(self) -> None:
        assert str(HTTPError(status=500)) == "500"

    def test_frozen(self) -> None:
        err = HTTPError(status=400)
        with pytest.raises(AttributeError):
            err.status = 500  # type: ignore[misc]

    def test_not_found_defaults(self) -> None:
        err = NotFound()
        assert err.status == 404
        assert err.detail == "Not Found"

    def test_catchable_as_http_error(self) -> None:
        with pytest.raises(HTTPError):
            raise NotFound("No page or file for /x")


class TestErrorResponse:
    def test_plain_text_with_status(self) -> None:
        response = error_response(NotFound("No page or file for /x"))
        assert response.status == 404
        assert response.content_type == "text/plain; charset=utf-8"
        assert response.text == "No page or file for /x"

    def test_headers_carried(self) -> None:
        response = error_response(HTTPError(status=403, headers=(("X-Reason", "path"),)))
        assert response.text == "403"
        assert response.header("X-Reason") == "path"
