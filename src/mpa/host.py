"""Host lifecycle: the dev server and the build runner.

``DevServer`` is the ASGI application behind ``mpa dev``.  Plugins
install their middleware at construction; discovery runs during ASGI
lifespan startup, on the server's own event loop.

``build`` drives one production build: stage inputs, hand them to the
bundler, relocate the output and always clean up.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

import anyio

from mpa._internal.asgi import Receive, Scope, Send
from mpa.build.bundler import Bundler, CopyBundler
from mpa.config import TEMP_DIR_NAME, HostConfig
from mpa.middleware.protocol import Middleware
from mpa.middleware.static import StaticFiles
from mpa.plugin import MpaPlugin
from mpa.server.handler import handle_request

logger = logging.getLogger("mpa.server")


class DevServer:
    """ASGI application for interactive mode.

    Middleware order: plugin middleware (page router, page index), then
    user middleware added with :meth:`use`, then project files served
    from the root.  Anything left over is a 404.

    Usage::

        server = DevServer(HostConfig(root="."), plugins=[MpaPlugin()])
        # pounce / any ASGI server
    """

    __slots__ = ("_middleware", "_started", "_startup_lock", "host_config", "plugins", "static")

    def __init__(
        self,
        host_config: HostConfig | None = None,
        *,
        plugins: Sequence[MpaPlugin] = (),
    ) -> None:
        self.host_config = host_config or HostConfig()
        self.plugins = tuple(plugins)
        self._middleware: list[Middleware] = []
        self._started = False
        self._startup_lock: anyio.Lock | None = None
        self.static = StaticFiles(self.host_config.root_path, prefix="/")

        for plugin in self.plugins:
            plugin.configure_server(self)

    def use(self, middleware: Middleware) -> None:
        """Append a middleware; it runs after those already installed."""
        self._middleware.append(middleware)

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        return (*self._middleware, self.static)

    async def startup(self) -> None:
        """Run the configuration-resolved hook of every plugin once.

        Concurrent callers wait for the first one to finish.
        """
        if self._started:
            return
        if self._startup_lock is None:
            self._startup_lock = anyio.Lock()
        async with self._startup_lock:
            if self._started:
                return
            for plugin in self.plugins:
                await plugin.config_resolved(self.host_config)
            self._started = True

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if not self._started:
            await self.startup()
        await handle_request(scope, receive, send, middleware=self.middleware)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Discovery runs at startup, before the first HTTP request, and
        completion is signalled back to the server.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return


async def build(
    plugin: MpaPlugin,
    host_config: HostConfig,
    bundler: Bundler | None = None,
) -> dict[str, Path]:
    """Run one production build.

    Args:
        plugin: The plugin whose registry drives the build.
        host_config: Host settings; ``command`` is forced to ``"build"``.
        bundler: Turns staged inputs into files under ``out_dir``;
            defaults to :class:`~mpa.build.bundler.CopyBundler`.

    Returns:
        Page name to the final HTML path under ``out_dir``.
    """
    if not host_config.is_build:
        host_config = replace(host_config, command="build")
    bundler = bundler or CopyBundler()
    root = Path(await anyio.Path(host_config.root_path).resolve())
    out_dir = Path(await anyio.Path(host_config.out_path).resolve())

    try:
        fragment = await plugin.config(host_config)
        await plugin.config_resolved(host_config)
        inputs: dict[str, Path] = fragment["build"]["input"]
        await bundler(inputs, root, out_dir)
    finally:
        await plugin.close_bundle()

    temp_dir = root / TEMP_DIR_NAME
    return {name: out_dir / path.relative_to(temp_dir) for name, path in inputs.items()}
