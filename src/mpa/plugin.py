"""The mpa plugin: page registry plus host lifecycle hooks.

The plugin owns the page registry, the template cache and the staging
pipeline.  A host drives it through these hooks, in order:

- ``config`` (build only): discover pages and stage bundler inputs
- ``config_resolved``: rediscover, swap the registry, clear caches
- ``configure_server`` (serve only): install the page middleware
- ``transform_index_html``: pass-through
- ``close_bundle`` (build only): relocate output, then clean up

The registry is replaced by one assignment once discovery finishes, so
a request never observes a half-built registry.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from mpa.build.staging import StagingPipeline
from mpa.config import HostConfig, MpaConfig
from mpa.middleware.pages import PageIndex, PageRouter
from mpa.pages.discovery import discover_pages, log_diagnostics
from mpa.pages.types import PageRegistry
from mpa.templating.cache import TemplateCache
from mpa.templating.integration import HtmlTransform

if TYPE_CHECKING:
    from mpa.host import DevServer

logger = logging.getLogger("mpa")

PLUGIN_NAME = "mpa"


class MpaPlugin:
    """Multi-page discovery, dev routing and build staging.

    Args:
        config: Plugin options; defaults match a ``src/pages`` layout.
        transforms: HTML transforms applied to dev-served pages.

    Usage::

        plugin = MpaPlugin(MpaConfig(output_dir="{dir}/{basename}-view"))
    """

    name = PLUGIN_NAME

    __slots__ = ("_host", "_pages", "cache", "config", "staging", "transforms")

    def __init__(
        self,
        config: MpaConfig | None = None,
        *,
        transforms: Sequence[HtmlTransform] = (),
    ) -> None:
        self.config = config or MpaConfig()
        self.transforms = tuple(transforms)
        self.cache = TemplateCache(
            default_data=self.config.default_data,
            template_options=self.config.template_options,
        )
        self.staging = StagingPipeline(self.cache)
        self._pages: PageRegistry = MappingProxyType({})
        self._host: HostConfig | None = None

        if self.config.verbose:
            logging.getLogger("mpa").setLevel(logging.DEBUG)

    @property
    def pages(self) -> PageRegistry:
        """The current page registry."""
        return self._pages

    @property
    def host(self) -> HostConfig | None:
        return self._host

    async def refresh(self, root: str | Path, *, batch_mode: bool = False) -> PageRegistry:
        """Rebuild the registry from disk and clear both template caches."""
        pages = await discover_pages(root, self.config, batch_mode=batch_mode)
        self._pages = pages
        self.cache.clear()
        return pages

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    async def config(self, host: HostConfig) -> dict[str, Any]:
        """Pre-configuration hook: stage bundler inputs for a build.

        Returns a config fragment ``{"build": {"input": {...}}}`` in
        build mode and ``{}`` otherwise.
        """
        logger.info("Config hook called for command: %s", host.command)
        if not host.is_build:
            return {}

        root = host.root_path
        logger.info("Build command detected, creating temp HTML files in %s", root)
        pages = await discover_pages(root, self.config, batch_mode=True)
        inputs = await self.staging.stage(pages, root)
        self._pages = pages
        logger.info("Build config created with %d inputs: %s", len(inputs), ", ".join(inputs))
        return {"build": {"input": inputs}}

    async def config_resolved(self, host: HostConfig) -> None:
        """Configuration-resolved hook: discover pages for this run."""
        self._host = host
        logger.info("Plugin initialized with config: %s", host.command)

        await log_diagnostics(host.root_path, self.config)
        pages = await self.refresh(host.root_path, batch_mode=host.is_build)

        if host.is_build:
            if self.config.output_dir is not None:
                logger.info("Build mode: output_dir configuration will be applied")
        else:
            logger.info("Development mode: using virtual routing for %d pages", len(pages))
            if self.config.output_dir is not None:
                logger.info("output_dir configuration will be ignored in development mode")

    def configure_server(self, server: DevServer) -> None:
        """Dev-server hook: install the virtual page router and index."""
        logger.info("Configuring dev server")
        host = server.host_config
        server.use(
            PageRouter(
                lambda: self._pages,
                self.cache,
                host.root_path,
                base=host.base,
                transforms=self.transforms,
            )
        )
        server.use(PageIndex(lambda: self._pages))
        logger.info("Dev server configured with virtual routing")

    async def transform_index_html(self, html: str, ctx: dict[str, Any] | None = None) -> str:  # noqa: ARG002
        """HTML post-processing hook; pages are already final in both modes."""
        return html

    async def close_bundle(self) -> None:
        """Build-completion hook: relocate bundled HTML, then clean up."""
        logger.info("Build completed, processing output files")
        host = self._host
        try:
            if host is not None and host.is_build:
                logger.info("Processing HTML files in output directory: %s", host.out_path)
                await self.staging.relocate(host.out_path)
        finally:
            logger.info("Cleaning up temp files")
            await self.staging.cleanup(host.root_path if host is not None else None)
        logger.info("Build completed")
