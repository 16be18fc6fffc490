"""Development server.

Starts a pounce ASGI server with the live DevServer object.
Uses single-worker mode; the registry is rebuilt on restart.
"""

from __future__ import annotations

import logging
import threading
import webbrowser

logger = logging.getLogger("mpa.server")


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    open_browser: bool = False,
) -> None:
    """Start a pounce dev server with the given ASGI app.

    Pounce's ``run()`` takes an import string, but mpa has a live
    ``DevServer`` object. We use ``pounce.Server`` directly with the
    ASGI callable.

    Args:
        app: ASGI callable (``DevServer`` instance).
        host: Bind host address.
        port: Bind port number.
        open_browser: Open the served URL once, shortly after startup.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    if open_browser:
        schedule_browser(f"http://{host}:{port}/")

    config = ServerConfig(host=host, port=port, workers=1)
    server = Server(config, app)
    server.run()


def schedule_browser(url: str, delay: float = 1.0) -> threading.Timer:
    """Open *url* in the default browser after *delay* seconds."""
    logger.info("Opening %s", url)
    timer = threading.Timer(delay, webbrowser.open, args=(url,))
    timer.daemon = True
    timer.start()
    return timer
