"""Plugin and host configuration.

Both configs are frozen dataclasses: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

# Fixed probe order; first match wins
DEFAULT_ENTRY_NAMES: tuple[str, ...] = ("index.js", "main.js", "app.js")

# Scratch directory created under the project root during a build
TEMP_DIR_NAME = ".mpa-temp"


@dataclass(frozen=True, slots=True)
class MpaConfig:
    """Page discovery and rendering options. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = MpaConfig(pages_dir="app/pages", output_dir="{dir}/{basename}-view")
    """

    # Templates
    template: str = "index.html"
    template_options: Mapping[str, Any] = field(default_factory=dict)
    default_data: Mapping[str, Any] = field(default_factory=dict)

    # Discovery
    pages_dir: str = "src/pages"
    nested: bool = True
    entry_names: tuple[str, ...] = DEFAULT_ENTRY_NAMES

    # Build output layout: "{dir}/{basename}" pattern or (name, info) -> str
    output_dir: str | Callable[..., str] | None = None

    # Diagnostics
    verbose: bool = False

    # Open the browser once the dev server is up
    open_auto: bool = True


@dataclass(frozen=True, slots=True)
class HostConfig:
    """Resolved host settings for one run.

    ``command`` selects the execution mode: ``"serve"`` installs the
    virtual router, ``"build"`` stages HTML files for the bundler.
    """

    root: str | Path = "."
    command: Literal["serve", "build"] = "serve"
    base: str = "/"
    out_dir: str | Path = "dist"

    # Dev server
    host: str = "127.0.0.1"
    port: int = 5173

    @property
    def root_path(self) -> Path:
        """The project root as an absolute path.

        Lexical only; coroutines resolve symlinks through ``anyio.Path``.
        """
        return Path(self.root).absolute()

    @property
    def out_path(self) -> Path:
        """The bundler output directory, relative to the root unless absolute."""
        return self.root_path / self.out_dir

    @property
    def is_build(self) -> bool:
        return self.command == "build"
