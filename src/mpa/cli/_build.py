"""``mpa build`` — stage, bundle and relocate every page."""

import argparse
import sys

import anyio

from mpa.cli._options import configure_logging, plugin_config
from mpa.config import HostConfig


def run_build(args: argparse.Namespace) -> None:
    """Run one production build and print the generated files."""
    from mpa.host import build
    from mpa.plugin import MpaPlugin

    configure_logging(args.verbose)
    plugin = MpaPlugin(plugin_config(args, output_dir=args.output_pattern))
    host_config = HostConfig(
        root=args.root,
        command="build",
        base=args.base,
        out_dir=args.out_dir,
    )

    try:
        outputs = anyio.run(build, plugin, host_config)
    except OSError as exc:
        print(f"Error: build failed: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    for name, path in outputs.items():
        print(f"  {name} -> {path}")
