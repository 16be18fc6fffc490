"""Directory-driven page registry.

The ``pages/`` directory structure defines page names, templates and
render data.

Conventions:

    src/pages/
      index/
        index.js         # page "index"
      admin/
        main.js          # page "admin"
        index.html       # template for "admin" only
        users/
          app.js         # page "admin/users"
          info.json      # {"title": "Users"} -> {{ info.title }}
"""

from mpa.pages.discovery import discover_pages, find_entry_file, load_page_data
from mpa.pages.resolve import (
    ensure_html_suffix,
    output_policy,
    resolve_output_path,
    resolve_template_path,
)
from mpa.pages.types import FunctionOutput, Page, PageInfo, PageRegistry, PatternOutput

__all__ = [
    "FunctionOutput",
    "Page",
    "PageInfo",
    "PageRegistry",
    "PatternOutput",
    "discover_pages",
    "ensure_html_suffix",
    "find_entry_file",
    "load_page_data",
    "output_policy",
    "resolve_output_path",
    "resolve_template_path",
]
