"""Data models for directory-driven pages.

Immutable frozen dataclasses representing discovered pages and the
output-path policy variants.  Built once per discovery pass.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class PageInfo:
    """What an output-path function sees about a page.

    Attributes:
        entry_file: Absolute path to the page's script entry point.
        template: Absolute template path, or ``None`` for the skeleton.
        data: Metadata loaded from the page's ``info.json``.
    """

    entry_file: Path
    template: Path | None
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Page:
    """A discovered page.

    Attributes:
        name: Slash-separated logical path (e.g. ``admin/users``).
        entry_file: Absolute path to the page's script entry point.
        template: Absolute template path, or ``None`` when no candidate
            exists (the built-in skeleton is used at render time).
        output_path: Relative ``.html`` path of the rendered output.
        data: Metadata from ``info.json``; nested under ``info`` when
            rendering.
    """

    name: str
    entry_file: Path
    template: Path | None
    output_path: str
    data: Mapping[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str:
        """Display title: ``data["title"]`` when set, else the page name."""
        title = self.data.get("title")
        return str(title) if title else self.name

    def url_variants(self) -> tuple[str, ...]:
        """Every request path the dev router answers for this page."""
        return (
            f"/{self.name}",
            f"/{self.name}/",
            f"/{self.name}.html",
            f"/{self.name}/index.html",
            f"/{self.output_path}",
        )


# Read-only name -> Page mapping produced by one discovery pass
type PageRegistry = Mapping[str, Page]


# ---------------------------------------------------------------------------
# Output policy variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PatternOutput:
    """``{name}``/``{dir}``/``{basename}`` placeholder pattern.

    Placeholders are replaced textually, every occurrence::

        PatternOutput("{dir}/{basename}-view").render("admin/users", info)
        # -> "admin/users-view"
    """

    pattern: str

    def render(self, page_name: str, page_info: PageInfo) -> str:  # noqa: ARG002
        head, sep, basename = page_name.rpartition("/")
        directory = head if sep else ""
        return (
            self.pattern.replace("{name}", page_name)
            .replace("{dir}", directory)
            .replace("{basename}", basename)
        )


@dataclass(frozen=True, slots=True)
class FunctionOutput:
    """User callable ``(page_name, page_info) -> path``; result used verbatim."""

    func: Callable[[str, PageInfo], str]

    def render(self, page_name: str, page_info: PageInfo) -> str:
        return str(self.func(page_name, page_info))


type OutputPolicy = PatternOutput | FunctionOutput
