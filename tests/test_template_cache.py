"""Tests for mpa.templating — template caches and page rendering."""

from pathlib import Path

import pytest

from mpa.errors import RenderError, TemplateReadError
from mpa.pages.types import Page
from mpa.templating.cache import TemplateCache
from mpa.templating.integration import (
    DEFAULT_TEMPLATE,
    apply_transforms,
    entry_url,
    inject_entry_script,
    render_page,
)

SKELETON = "<html><head><title>{{ title }}</title></head><body><main></main></body></html>"


def _page(tmp_path: Path, *, template: Path | None = None, data: dict | None = None) -> Page:
    return Page(
        name="home",
        entry_file=tmp_path / "src" / "pages" / "home" / "index.js",
        template=template,
        output_path="home.html",
        data=data or {},
    )


class TestTemplateContent:
    async def test_reads_file_once(self, tmp_path: Path) -> None:
        template = tmp_path / "index.html"
        template.write_text(SKELETON)
        cache = TemplateCache()

        first = await cache.get_template_content(template)
        second = await cache.get_template_content(template)

        assert first == second == SKELETON
        assert cache.reads == 1

    async def test_missing_file_raises(self, tmp_path: Path) -> None:
        cache = TemplateCache()

        with pytest.raises(TemplateReadError, match="missing.html"):
            await cache.get_template_content(tmp_path / "missing.html")

    async def test_clear_forces_reread(self, tmp_path: Path) -> None:
        template = tmp_path / "index.html"
        template.write_text("<p>one</p>")
        cache = TemplateCache()
        await cache.get_template_content(template)

        template.write_text("<p>two</p>")
        cache.clear()

        assert await cache.get_template_content(template) == "<p>two</p>"
        assert cache.reads == 2
        assert len(cache) == 1


class TestRender:
    def test_title_from_page_data(self) -> None:
        cache = TemplateCache()

        html = cache.render("<title>{{ title }}</title>", {"title": "About"})

        assert html == "<title>About</title>"

    def test_title_defaults_to_empty(self) -> None:
        cache = TemplateCache()

        assert cache.render("<title>{{ title }}</title>") == "<title></title>"

    def test_default_data_is_visible(self) -> None:
        cache = TemplateCache(default_data={"site": "Docs"})

        assert cache.render("<p>{{ site }}</p>", {}) == "<p>Docs</p>"

    def test_page_data_nested_under_info(self) -> None:
        cache = TemplateCache(default_data={"site": "Docs"})

        html = cache.render("{{ site }}|{{ info.site }}", {"site": "Page"})

        assert html == "Docs|Page"

    def test_default_title_wins_over_page_title(self) -> None:
        cache = TemplateCache(default_data={"title": "Site"})

        assert cache.render("{{ title }}", {"title": "Page"}) == "Site"

    def test_identical_renders_are_reused(self) -> None:
        cache = TemplateCache()

        first = cache.render(SKELETON, {"title": "A", "tags": ["x", "y"]})
        second = cache.render(SKELETON, {"title": "A", "tags": ["x", "y"]})

        assert first == second
        assert cache.renders == 1

    def test_different_data_renders_again(self) -> None:
        cache = TemplateCache()

        cache.render(SKELETON, {"title": "A"})
        cache.render(SKELETON, {"title": "B"})

        assert cache.renders == 2

    def test_key_order_is_part_of_the_identity(self) -> None:
        cache = TemplateCache()
        template = "{% for key in info %}{{ key }}{% endfor %}"

        first = cache.render(template, {"a": 2, "b": 1})
        second = cache.render(template, {"b": 1, "a": 2})

        assert first == "ab"
        assert second == "ba"
        assert cache.renders == 2

    def test_invalid_template_raises(self) -> None:
        cache = TemplateCache()

        with pytest.raises(RenderError):
            cache.render("{% if title %}unclosed", {"title": "x"})

    def test_context_for_does_not_share_state(self) -> None:
        cache = TemplateCache(default_data={"site": "Docs"})

        context = cache.context_for({"title": "A"})
        context["site"] = "changed"

        assert cache.context_for({})["site"] == "Docs"


class TestRenderPage:
    async def test_same_page_twice_reads_template_once(self, tmp_path: Path) -> None:
        template = tmp_path / "index.html"
        template.write_text(SKELETON)
        cache = TemplateCache()
        page = _page(tmp_path, template=template, data={"title": "Home"})

        first = await render_page(cache, page)
        second = await render_page(cache, page)

        assert first == second
        assert "<title>Home</title>" in first
        assert cache.reads == 1

    async def test_no_template_uses_skeleton(self, tmp_path: Path) -> None:
        cache = TemplateCache()

        html = await render_page(cache, _page(tmp_path, data={"title": "Bare"}))

        assert "<title>Bare</title>" in html
        assert '<div id="app"></div>' in html
        assert cache.reads == 0

    async def test_vanished_template_uses_skeleton(self, tmp_path: Path) -> None:
        cache = TemplateCache()
        page = _page(tmp_path, template=tmp_path / "gone.html")

        html = await render_page(cache, page)

        assert html == cache.render(DEFAULT_TEMPLATE, {})


class TestInjectEntryScript:
    def test_inserted_before_body_close(self) -> None:
        html = inject_entry_script("<body><main></main></body>", "/src/pages/a/index.js")

        assert html == (
            '<body><main></main><script type="module" src="/src/pages/a/index.js"></script>\n'
            "</body>"
        )

    def test_only_first_body_close(self) -> None:
        html = inject_entry_script("<body></body><!-- </body> -->", "/a.js")

        assert html.count("<script") == 1
        assert html.endswith("<!-- </body> -->")

    def test_appended_without_body(self) -> None:
        html = inject_entry_script("<p>fragment</p>", "/a.js")

        assert html == '<p>fragment</p>\n<script type="module" src="/a.js"></script>'


class TestEntryUrl:
    async def test_relative_to_root(self, tmp_path: Path) -> None:
        entry = tmp_path / "src" / "pages" / "home" / "index.js"

        assert await entry_url(tmp_path, entry) == "/src/pages/home/index.js"

    async def test_base_prefix(self, tmp_path: Path) -> None:
        entry = tmp_path / "src" / "main.js"

        assert await entry_url(tmp_path, entry, "/app") == "/app/src/main.js"
        assert await entry_url(tmp_path, entry, "/app/") == "/app/src/main.js"

    async def test_symlinked_root_resolves(self, tmp_path: Path) -> None:
        real = tmp_path / "real"
        (real / "src").mkdir(parents=True)
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)

        assert await entry_url(link, real / "src" / "main.js") == "/src/main.js"


class _Upper:
    name = "upper"

    def transform(self, html: str, ctx: dict) -> str:
        return html.upper()


class _Suffix:
    name = "suffix"

    async def transform(self, html: str, ctx: dict) -> str:
        return f"{html}<!-- {ctx['page_name']} -->"


class _Broken:
    name = "broken"

    def transform(self, html: str, ctx: dict) -> str:
        raise RuntimeError("boom")


class TestApplyTransforms:
    async def test_sync_and_async_in_order(self) -> None:
        html = await apply_transforms("<p>x</p>", [_Upper(), _Suffix()], {"page_name": "home"})

        assert html == "<P>X</P><!-- home -->"

    async def test_failing_transform_is_skipped(self) -> None:
        html = await apply_transforms("<p>x</p>", [_Broken(), _Upper()], {"page_name": "home"})

        assert html == "<P>X</P>"
