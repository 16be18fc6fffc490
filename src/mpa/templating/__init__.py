"""Template caching, kida rendering and entry-script injection."""

from mpa.templating.cache import TemplateCache
from mpa.templating.integration import (
    DEFAULT_TEMPLATE,
    HtmlTransform,
    apply_transforms,
    entry_url,
    inject_entry_script,
    render_page,
)

__all__ = [
    "DEFAULT_TEMPLATE",
    "HtmlTransform",
    "TemplateCache",
    "apply_transforms",
    "entry_url",
    "inject_entry_script",
    "render_page",
]
