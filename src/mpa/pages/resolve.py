"""Output-path and template-path resolution.

One resolver serves both execution modes; ``batch_mode`` decides
whether the configured output policy applies.  The dev router always
serves pages at their natural ``<name>.html`` path, so custom layout
only affects materialized build artifacts.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import anyio

from mpa.pages.types import FunctionOutput, OutputPolicy, PageInfo, PatternOutput

HTML_SUFFIX = ".html"

# Per-page template sidecar
LOCAL_TEMPLATE = "index.html"


def ensure_html_suffix(path: str) -> str:
    """Append ``.html`` unless *path* already ends with it."""
    return path if path.endswith(HTML_SUFFIX) else f"{path}{HTML_SUFFIX}"


def output_policy(value: object) -> OutputPolicy | None:
    """Build an output policy from a raw ``output_dir`` setting.

    Strings become :class:`PatternOutput`, callables become
    :class:`FunctionOutput`.  Any other shape is treated as absent.
    """
    if isinstance(value, PatternOutput | FunctionOutput):
        return value
    if isinstance(value, str):
        return PatternOutput(value) if value else None
    if callable(value):
        func: Callable[[str, PageInfo], str] = value  # type: ignore[assignment]
        return FunctionOutput(func)
    return None


def resolve_output_path(
    page_name: str,
    page_info: PageInfo,
    batch_mode: bool = False,
    policy: OutputPolicy | None = None,
) -> str:
    """Compute the relative ``.html`` path a page's output will occupy.

    Args:
        page_name: Slash-separated page name.
        page_info: Entry, template and data handed to function policies.
        batch_mode: True during a build; policies are ignored otherwise.
        policy: The configured output policy, if any.

    Returns:
        A relative path that always ends in ``.html``.
    """
    if not batch_mode or policy is None:
        return f"{page_name}{HTML_SUFFIX}"
    return ensure_html_suffix(policy.render(page_name, page_info))


async def resolve_template_path(page_dir: Path, root: Path, template: str | None) -> Path | None:
    """Pick the template for a page directory.

    Order: the page's own ``index.html``, then the globally configured
    template, then the root ``index.html``.  Returns ``None`` when the
    chosen candidate does not exist, so rendering falls back to the
    built-in skeleton.
    """
    local = anyio.Path(page_dir) / LOCAL_TEMPLATE
    if await local.is_file():
        return Path(local)

    candidate = root / template if template else root / LOCAL_TEMPLATE
    candidate_path = anyio.Path(candidate)
    if await candidate_path.is_file():
        return Path(await candidate_path.resolve())
    return None
