"""Tests for mpa.middleware.pages — virtual page routing and the page index."""

from pathlib import Path
from types import MappingProxyType

import pytest

from mpa.http.headers import Headers
from mpa.http.request import Request
from mpa.http.response import Response
from mpa.middleware.pages import PageIndex, PageRouter, match_page
from mpa.pages.types import Page
from mpa.templating.cache import TemplateCache

HTML_ACCEPT = {"accept": "text/html,application/xhtml+xml;q=0.9"}


def _request(path: str, headers: dict[str, str] | None = None) -> Request:
    return Request(method="GET", path=path, headers=Headers.from_pairs(headers or HTML_ACCEPT))


def _page(root: Path, name: str, **kwargs) -> Page:
    kwargs.setdefault("template", None)
    kwargs.setdefault("output_path", f"{name}.html")
    return Page(
        name=name,
        entry_file=root / "src" / "pages" / name / "index.js",
        **kwargs,
    )


class _Next:
    """Terminal handler that records whether it was reached."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def __call__(self, request: Request) -> Response:
        self.calls.append(request.path)
        return Response("next", status=404, content_type="text/plain")


@pytest.fixture
def registry(tmp_path: Path) -> MappingProxyType:
    return MappingProxyType(
        {
            "admin": _page(tmp_path, "admin"),
            "admin/users": _page(tmp_path, "admin/users", data={"title": "Users"}),
            "index": _page(tmp_path, "index"),
        }
    )


class TestMatchPage:
    @pytest.mark.parametrize(
        "path",
        ["/admin/users", "/admin/users/", "/admin/users.html", "/admin/users/index.html"],
    )
    def test_name_variants(self, registry, path: str) -> None:
        page = match_page(registry, path)
        assert page is not None
        assert page.name == "admin/users"

    def test_nested_index_is_not_the_parent(self, registry) -> None:
        assert match_page(registry, "/admin/users/index.html").name == "admin/users"
        assert match_page(registry, "/admin/index.html").name == "admin"

    def test_output_path_variant(self, tmp_path: Path) -> None:
        pages = {"blog": _page(tmp_path, "blog", output_path="news/blog-view.html")}

        assert match_page(pages, "/news/blog-view.html").name == "blog"

    def test_root_falls_back_to_index_page(self, registry) -> None:
        assert match_page(registry, "/").name == "index"

    def test_root_without_index_page(self, tmp_path: Path) -> None:
        assert match_page({"admin": _page(tmp_path, "admin")}, "/") is None

    def test_unknown_path(self, registry) -> None:
        assert match_page(registry, "/missing") is None


class TestPageRouter:
    async def test_serves_rendered_page_with_entry(self, tmp_path: Path, registry) -> None:
        router = PageRouter(lambda: registry, TemplateCache(), tmp_path)
        nxt = _Next()

        response = await router(_request("/admin/users"), nxt)

        assert response.status == 200
        assert response.content_type == "text/html; charset=utf-8"
        assert "<title>Users</title>" in response.text
        assert '<script type="module" src="/src/pages/admin/users/index.js"></script>' in (
            response.text
        )
        assert nxt.calls == []

    async def test_entry_uses_base(self, tmp_path: Path, registry) -> None:
        router = PageRouter(lambda: registry, TemplateCache(), tmp_path, base="/app/")

        response = await router(_request("/admin"), _Next())

        assert 'src="/app/src/pages/admin/index.js"' in response.text

    async def test_query_string_is_ignored(self, tmp_path: Path, registry) -> None:
        router = PageRouter(lambda: registry, TemplateCache(), tmp_path)

        response = await router(_request("/admin.html?v=1"), _Next())

        assert response.status == 200

    async def test_unmatched_falls_through(self, tmp_path: Path, registry) -> None:
        router = PageRouter(lambda: registry, TemplateCache(), tmp_path)
        nxt = _Next()

        response = await router(_request("/src/pages/admin/index.js"), nxt)

        assert response.text == "next"
        assert nxt.calls == ["/src/pages/admin/index.js"]

    async def test_non_html_request_falls_through(self, tmp_path: Path, registry) -> None:
        router = PageRouter(lambda: registry, TemplateCache(), tmp_path)
        nxt = _Next()

        await router(_request("/admin", {"accept": "application/json"}), nxt)

        assert nxt.calls == ["/admin"]

    async def test_empty_registry_falls_through_at_root(self, tmp_path: Path) -> None:
        router = PageRouter(lambda: MappingProxyType({}), TemplateCache(), tmp_path)
        nxt = _Next()

        await router(_request("/"), nxt)

        assert nxt.calls == ["/"]

    async def test_render_failure_falls_through(self, tmp_path: Path) -> None:
        template = tmp_path / "broken.html"
        template.write_text("{% if title %}unclosed")
        pages = {"broken": _page(tmp_path, "broken", template=template)}
        router = PageRouter(lambda: pages, TemplateCache(), tmp_path)
        nxt = _Next()

        response = await router(_request("/broken"), nxt)

        assert response.text == "next"
        assert nxt.calls == ["/broken"]

    async def test_sees_swapped_registry(self, tmp_path: Path) -> None:
        state = {"pages": MappingProxyType({})}
        router = PageRouter(lambda: state["pages"], TemplateCache(), tmp_path)
        nxt = _Next()

        await router(_request("/admin"), nxt)
        state["pages"] = MappingProxyType({"admin": _page(tmp_path, "admin")})
        response = await router(_request("/admin"), nxt)

        assert nxt.calls == ["/admin"]
        assert response.status == 200

    async def test_transforms_run_before_injection(self, tmp_path: Path, registry) -> None:
        seen: list[dict] = []

        class Marker:
            name = "marker"

            def transform(self, html: str, ctx: dict) -> str:
                seen.append(ctx)
                assert "<script" not in html
                return html.replace("<body>", "<body><!-- dev -->", 1)

        router = PageRouter(lambda: registry, TemplateCache(), tmp_path, transforms=[Marker()])

        response = await router(_request("/admin"), _Next())

        assert "<!-- dev -->" in response.text
        assert seen[0]["page_name"] == "admin"
        assert seen[0]["is_build_mode"] is False


class TestPageIndex:
    async def test_lists_every_page(self, registry) -> None:
        index = PageIndex(lambda: registry)

        response = await index(_request("/"), _Next())

        assert response.status == 200
        assert response.text == (
            '<a target="_self" href="/admin.html">admin</a><br/>'
            '<a target="_self" href="/admin/users.html">Users</a><br/>'
            '<a target="_self" href="/index.html">index</a><br/>'
        )

    async def test_escapes_titles(self, tmp_path: Path) -> None:
        pages = {"x": _page(tmp_path, "x", data={"title": "<b>X</b>"})}

        response = await PageIndex(lambda: pages)(_request("/"), _Next())

        assert "&lt;b&gt;X&lt;/b&gt;" in response.text

    async def test_other_paths_fall_through(self, registry) -> None:
        nxt = _Next()

        await PageIndex(lambda: registry)(_request("/admin"), nxt)

        assert nxt.calls == ["/admin"]

    async def test_empty_registry(self) -> None:
        response = await PageIndex(lambda: {})(_request("/"), _Next())

        assert response.text == ""
