"""``mpa dev`` — serve pages on demand with the virtual router."""

import argparse

from mpa.cli._options import configure_logging, plugin_config
from mpa.config import HostConfig


def run_dev(args: argparse.Namespace) -> None:
    """Assemble a DevServer for ``args.root`` and run it under pounce."""
    from mpa.host import DevServer
    from mpa.plugin import MpaPlugin
    from mpa.server.dev import run_dev_server

    configure_logging(args.verbose)
    config = plugin_config(args, open_auto=not args.no_open)

    defaults = HostConfig()
    host_config = HostConfig(
        root=args.root,
        command="serve",
        base=args.base,
        host=args.host or defaults.host,
        port=args.port or defaults.port,
    )
    server = DevServer(host_config, plugins=[MpaPlugin(config)])
    run_dev_server(
        server,
        host_config.host,
        host_config.port,
        open_browser=config.open_auto,
    )
