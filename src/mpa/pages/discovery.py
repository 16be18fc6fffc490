"""Filesystem page discovery for the pages/ directory.

Walks the pages directory tree and discovers:
- directories containing an entry script (``index.js``, ``main.js``,
  ``app.js``; first match wins) as pages
- a page-local ``index.html`` as that page's template
- a page-local ``info.json`` as that page's render data

Page names are directory paths relative to the pages root, joined
with ``/``.  With ``nested`` enabled, a page directory may also
contain further pages (``admin`` and ``admin/users``).

Each recursive call returns its own mapping and the caller merges it,
so no accumulator is shared between levels.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import anyio

from mpa.config import MpaConfig
from mpa.errors import ConfigurationError, MetadataError
from mpa.pages.resolve import output_policy, resolve_output_path, resolve_template_path
from mpa.pages.types import OutputPolicy, Page, PageInfo, PageRegistry

logger = logging.getLogger("mpa.discovery")

# Per-page metadata sidecar
INFO_FILE = "info.json"


async def discover_pages(
    root: str | Path,
    config: MpaConfig,
    *,
    batch_mode: bool = False,
) -> PageRegistry:
    """Walk ``<root>/<pages_dir>`` and build a fresh page registry.

    Args:
        root: Project root; templates and entry URLs are relative to it.
        config: Plugin configuration (pages dir, template, nesting).
        batch_mode: Apply the configured output policy to output paths.

    Returns:
        Read-only mapping of page name to :class:`Page`.  A missing
        pages directory yields an empty registry rather than an error.
    """
    root_path = Path(await anyio.Path(root).resolve())
    pages_root = root_path / config.pages_dir
    logger.info("Scanning pages in %s", pages_root)

    if not await anyio.Path(pages_root).is_dir():
        logger.error("Pages directory not found: %s", pages_root)
        return MappingProxyType({})

    pages = await _scan_directory(
        pages_root,
        root_path,
        config,
        prefix="",
        batch_mode=batch_mode,
        policy=output_policy(config.output_dir),
    )

    if pages:
        logger.info("Found %d pages", len(pages))
        for name, page in pages.items():
            logger.debug(
                "Page: %s, entry: %s, template: %s",
                name,
                page.entry_file,
                page.template or "default",
            )
    else:
        logger.warning("No pages found in %s", pages_root)

    return MappingProxyType(pages)


async def _scan_directory(
    directory: Path,
    root: Path,
    config: MpaConfig,
    *,
    prefix: str,
    batch_mode: bool,
    policy: OutputPolicy | None,
) -> dict[str, Page]:
    """Discover pages in the subdirectories of *directory*.

    Args:
        directory: Directory being scanned.
        root: Project root.
        config: Plugin configuration.
        prefix: Page name of *directory* (``""`` for the pages root).
        batch_mode: Forwarded to output-path resolution.
        policy: Output policy built once per discovery pass.
    """
    try:
        children = sorted(
            [child async for child in anyio.Path(directory).iterdir() if await child.is_dir()],
            key=lambda child: child.name,
        )
    except OSError as exc:
        logger.error("Error scanning directory %s: %s", directory, exc)
        return {}

    result: dict[str, Page] = {}
    for child in children:
        child_dir = Path(child)
        name = f"{prefix}/{child.name}" if prefix else child.name

        entry_file = await find_entry_file(child_dir, config.entry_names)
        if entry_file is None:
            logger.debug("No entry file found for directory: %s", child_dir)
        else:
            try:
                page = await _build_page(
                    name,
                    child_dir,
                    entry_file,
                    root,
                    config,
                    batch_mode=batch_mode,
                    policy=policy,
                )
            except (MetadataError, ConfigurationError) as exc:
                logger.error("Skipping page %s: %s", name, exc)
            else:
                result[name] = page
                logger.info(
                    "Found page: %s, entry: %s, template: %s",
                    name,
                    entry_file,
                    page.template or "default",
                )

        if config.nested:
            nested = await _scan_directory(
                child_dir,
                root,
                config,
                prefix=name,
                batch_mode=batch_mode,
                policy=policy,
            )
            if nested:
                logger.debug("Found %d nested pages in %s", len(nested), name)
                result.update(nested)

    return result


async def find_entry_file(directory: Path, candidates: tuple[str, ...]) -> Path | None:
    """Return the first existing entry script in *directory*, or ``None``."""
    for candidate in candidates:
        path = anyio.Path(directory) / candidate
        if await path.is_file():
            return Path(path)
    return None


async def load_page_data(page_dir: Path) -> Mapping[str, Any]:
    """Load ``info.json`` from *page_dir*.

    An absent file yields an empty mapping.

    Raises:
        MetadataError: The file exists but cannot be read or is not a
            JSON object.
    """
    info_path = anyio.Path(page_dir) / INFO_FILE
    if not await info_path.is_file():
        return {}

    try:
        raw = await info_path.read_text(encoding="utf-8")
        data = json.loads(raw)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MetadataError(str(info_path), str(exc)) from exc

    if not isinstance(data, dict):
        raise MetadataError(str(info_path), "expected a JSON object")
    return data


async def _build_page(
    name: str,
    page_dir: Path,
    entry_file: Path,
    root: Path,
    config: MpaConfig,
    *,
    batch_mode: bool,
    policy: OutputPolicy | None,
) -> Page:
    template = await resolve_template_path(page_dir, root, config.template)
    if template is None:
        logger.warning("Template not found for page %s, using fallback", name)

    data = await load_page_data(page_dir)
    info = PageInfo(entry_file=entry_file, template=template, data=data)
    try:
        output_path = resolve_output_path(name, info, batch_mode, policy)
    except Exception as exc:
        msg = f"output_dir policy failed for page {name!r}: {exc!r}"
        raise ConfigurationError(msg) from exc

    return Page(
        name=name,
        entry_file=entry_file,
        template=template,
        output_path=output_path,
        data=data,
    )


async def log_diagnostics(root: str | Path, config: MpaConfig) -> None:
    """Log the pages directory listing and global template status."""
    root_path = Path(await anyio.Path(root).resolve())
    pages_root = anyio.Path(root_path / config.pages_dir)

    logger.info("Project root: %s", root_path)
    logger.info("Pages directory: %s", pages_root)
    logger.info("Template: %s", config.template)

    if await pages_root.is_dir():
        try:
            names = sorted([child.name async for child in pages_root.iterdir()])
        except OSError as exc:
            logger.error("Failed to read pages directory: %s", exc)
        else:
            logger.info("Pages directory contains: %s", ", ".join(names) or "empty")
    else:
        logger.error("Pages directory not found: %s", pages_root)

    template_path = anyio.Path(root_path / config.template)
    if await template_path.is_file():
        logger.info("Template file found: %s", template_path)
    else:
        logger.warning("Template file not found: %s", template_path)
