"""mpa CLI — dev server and production build.

Entry point registered as ``mpa`` in ``pyproject.toml``::

    [project.scripts]
    mpa = "mpa.cli:main"
"""

import argparse
import sys


def _add_plugin_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--root", default=".", help="Project root directory")
    parser.add_argument("--pages-dir", default=None, help="Pages directory (default: src/pages)")
    parser.add_argument("--template", default=None, help="Global template (default: index.html)")
    parser.add_argument(
        "--data",
        default=None,
        help="JSON file with default data merged into every page",
    )
    parser.add_argument(
        "--no-nested",
        action="store_true",
        help="Only discover pages directly under the pages directory",
    )
    parser.add_argument("--base", default="/", help="Public base path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Diagnostic logging")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``mpa`` command."""
    parser = argparse.ArgumentParser(
        prog="mpa",
        description="mpa — directory-driven multi-page HTML generation.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- mpa dev ----------------------------------------------------------
    dev_parser = subparsers.add_parser("dev", help="Serve pages on demand")
    _add_plugin_options(dev_parser)
    dev_parser.add_argument("--host", default=None, help="Bind host address")
    dev_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    dev_parser.add_argument(
        "--no-open",
        action="store_true",
        help="Do not open the browser on startup",
    )

    # -- mpa build --------------------------------------------------------
    build_parser = subparsers.add_parser("build", help="Generate HTML for production")
    _add_plugin_options(build_parser)
    build_parser.add_argument("--out-dir", default="dist", help="Output directory")
    build_parser.add_argument(
        "--output-dir",
        dest="output_pattern",
        default=None,
        help="Output layout pattern, e.g. '{dir}/{basename}-view'",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "dev":
        from mpa.cli._dev import run_dev

        run_dev(args)
    elif args.command == "build":
        from mpa.cli._build import run_build

        run_build(args)
