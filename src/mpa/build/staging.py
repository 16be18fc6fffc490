"""Build staging: scratch HTML files for the bundler.

A build runs in three steps around the external bundler:

1. :meth:`StagingPipeline.stage` renders one HTML file per page into
   ``<root>/.mpa-temp/`` and returns ``{page name: file path}`` as the
   bundler's input set.
2. :meth:`StagingPipeline.relocate` moves whatever the bundler wrote
   under ``<out_dir>/.mpa-temp/`` up into ``<out_dir>``.
3. :meth:`StagingPipeline.cleanup` removes every scratch file and the
   scratch directory.  It runs whether or not the build succeeded.

Failures are per file: a page that fails to render or write is logged
and left out, the rest of the batch still materializes.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping
from pathlib import Path

import anyio
import anyio.to_thread

from mpa.config import TEMP_DIR_NAME
from mpa.errors import MpaError
from mpa.pages.types import Page
from mpa.templating.cache import TemplateCache
from mpa.templating.integration import (
    DEFAULT_TEMPLATE,
    entry_url,
    inject_entry_script,
    render_page,
)

logger = logging.getLogger("mpa.build")

# Entry script assumed by the synthesized index page
DEFAULT_ENTRY = "/src/main.js"

# Title of the synthesized index page when no root template exists
FALLBACK_TITLE = "Default Page"


class StagingPipeline:
    """Owns the scratch files of one build.

    Args:
        cache: Template cache shared with discovery and the dev router.

    Attributes:
        temp_files: Every scratch file created, in creation order.
    """

    __slots__ = ("_cache", "_root", "temp_files")

    def __init__(self, cache: TemplateCache) -> None:
        self._cache = cache
        self._root: Path | None = None
        self.temp_files: list[Path] = []

    @staticmethod
    def temp_dir(root: str | Path) -> Path:
        """Scratch directory under an already-resolved *root*."""
        return Path(root) / TEMP_DIR_NAME

    # ------------------------------------------------------------------
    # Staging
    # ------------------------------------------------------------------

    async def stage(self, pages: Mapping[str, Page], root: str | Path) -> dict[str, Path]:
        """Write one scratch HTML file per page.

        Args:
            pages: The page registry for this build.
            root: Project root; entry scripts are referenced relative to it.

        Returns:
            Page name to absolute scratch-file path.  Never empty: with no
            usable pages a single ``index`` input is synthesized.
        """
        root_path = Path(await anyio.Path(root).resolve())
        self._root = root_path
        temp_dir = self.temp_dir(root_path)
        await anyio.Path(temp_dir).mkdir(parents=True, exist_ok=True)

        if not pages:
            logger.warning("No pages found, creating a default index page")
            return await self._stage_fallback(root_path, temp_dir)

        logger.info("Processing %d pages for build", len(pages))
        inputs: dict[str, Path] = {}
        for name, page in pages.items():
            try:
                inputs[name] = await self._stage_page(page, root_path, temp_dir)
            except (MpaError, OSError, ValueError) as exc:
                logger.error("Failed to create temp HTML for %s: %s", name, exc)

        if not inputs:
            logger.warning("No inputs created, creating fallback entry")
            return await self._stage_fallback(root_path, temp_dir)

        logger.info("Created %d temp HTML files: %s", len(inputs), ", ".join(inputs))
        return inputs

    async def _stage_page(self, page: Page, root: Path, temp_dir: Path) -> Path:
        target = Path(await anyio.Path(temp_dir / page.output_path.lstrip("/")).resolve())
        if not target.is_relative_to(temp_dir):
            msg = f"output path {page.output_path!r} escapes the scratch directory"
            raise ValueError(msg)

        await anyio.Path(target.parent).mkdir(parents=True, exist_ok=True)

        html = await render_page(self._cache, page)
        # Root-relative: the bundler rewrites it for each output location
        src = await entry_url(root, page.entry_file, "/")
        logger.debug("Injecting entry script: %s for page: %s", src, page.name)
        html = inject_entry_script(html, src)

        await self._write(target, html)
        logger.info("Created temp HTML for %s: %s", page.name, target)
        return target

    async def _stage_fallback(self, root: Path, temp_dir: Path) -> dict[str, Path]:
        root_index = anyio.Path(root / "index.html")
        if await root_index.is_file():
            logger.info("Using root index.html as template: %s", root_index)
            html = await root_index.read_text(encoding="utf-8")
        else:
            logger.warning("No root index.html found, using default template")
            html = self._cache.render(DEFAULT_TEMPLATE, {"title": FALLBACK_TITLE})

        target = temp_dir / "index.html"
        await self._write(target, inject_entry_script(html, DEFAULT_ENTRY))
        logger.info("Created default index.html at %s", target)
        return {"index": target}

    async def _write(self, target: Path, html: str) -> None:
        await anyio.Path(target).write_text(html, encoding="utf-8")
        self.temp_files.append(target)

    # ------------------------------------------------------------------
    # Post-bundle
    # ------------------------------------------------------------------

    async def relocate(self, out_dir: str | Path) -> None:
        """Move bundled files out of ``<out_dir>/.mpa-temp`` into ``<out_dir>``.

        Only the scratch subtree is touched.  Individual move failures
        are logged and skipped; nothing is raised.
        """
        out_path = Path(await anyio.Path(out_dir).resolve())
        nested_temp = out_path / TEMP_DIR_NAME
        if not await anyio.Path(nested_temp).is_dir():
            return

        logger.info("Found %s in output, moving files to correct locations", TEMP_DIR_NAME)
        failures = await self._move_tree(nested_temp, out_path, out_path)

        try:
            await anyio.to_thread.run_sync(shutil.rmtree, nested_temp)
        except OSError as exc:
            logger.error("Failed to remove %s: %s", nested_temp, exc)
            return

        if failures:
            logger.warning("Moved files from %s with %d failures", TEMP_DIR_NAME, failures)
        else:
            logger.info("Successfully moved all files from %s to correct locations", TEMP_DIR_NAME)

    async def _move_tree(self, source: Path, target: Path, out_path: Path) -> int:
        """Recursively move *source* contents under *target*; return failure count."""
        failures = 0
        try:
            entries = [entry async for entry in anyio.Path(source).iterdir()]
        except OSError as exc:
            logger.error("Failed to list %s: %s", source, exc)
            return 1

        for entry in sorted(entries, key=lambda e: e.name):
            destination = target / entry.name
            try:
                if await entry.is_dir():
                    await anyio.Path(destination).mkdir(parents=True, exist_ok=True)
                    failures += await self._move_tree(Path(entry), destination, out_path)
                    continue
                await anyio.Path(destination.parent).mkdir(parents=True, exist_ok=True)
                await entry.replace(destination)
            except OSError as exc:
                logger.error("Failed to move %s: %s", entry, exc)
                failures += 1
            else:
                logger.debug("Moved file: %s", destination.relative_to(out_path))
        return failures

    async def cleanup(self, root: str | Path | None = None) -> None:
        """Delete every scratch file and the scratch directory.

        Never raises; errors are logged.  Safe to call repeatedly.
        """
        logger.debug("Cleaning up %d temp files", len(self.temp_files))
        for path in self.temp_files:
            try:
                if await anyio.Path(path).exists():
                    logger.debug("Deleting temp file: %s", path)
                    await anyio.Path(path).unlink()
            except OSError as exc:
                logger.debug("Failed to delete temp file %s: %s", path, exc)

        root_path = Path(await anyio.Path(root).resolve()) if root is not None else self._root
        if root_path is not None:
            temp_dir = self.temp_dir(root_path)
            try:
                if await anyio.Path(temp_dir).exists():
                    logger.debug("Deleting temp directory: %s", temp_dir)
                    await anyio.to_thread.run_sync(shutil.rmtree, temp_dir)
            except OSError as exc:
                logger.debug("Failed to delete temp directory: %s", exc)

        self.temp_files = []
