"""mpa — directory-driven multi-page HTML generation.

Discovers page entry points under ``src/pages``, renders each through a
kida template, and either serves them on demand during development or
stages them for a bundler during a production build.

Basic usage::

    from mpa import MpaConfig, MpaPlugin
    from mpa.host import DevServer, HostConfig

    plugin = MpaPlugin(MpaConfig(pages_dir="src/pages"))
    server = DevServer(HostConfig(root="."), plugins=[plugin])

Build::

    from mpa.host import build

    await build(plugin, HostConfig(root=".", command="build"))
"""

__version__ = "0.1.0"
__all__ = [
    "HostConfig",
    "MetadataError",
    "MpaConfig",
    "MpaError",
    "MpaPlugin",
    "Page",
    "RenderError",
    "TemplateReadError",
    "discover_pages",
    "resolve_output_path",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import mpa`` fast while providing a clean top-level API.
    """
    if name in ("MpaConfig", "HostConfig"):
        from mpa import config as _config

        return getattr(_config, name)

    if name == "MpaPlugin":
        from mpa.plugin import MpaPlugin

        return MpaPlugin

    if name == "Page":
        from mpa.pages.types import Page

        return Page

    if name == "discover_pages":
        from mpa.pages.discovery import discover_pages

        return discover_pages

    if name == "resolve_output_path":
        from mpa.pages.resolve import resolve_output_path

        return resolve_output_path

    if name in ("MpaError", "MetadataError", "RenderError", "TemplateReadError"):
        from mpa import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
