"""Translate parsed CLI arguments into configuration objects."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from mpa.config import MpaConfig

_LOG_FORMAT = "[%(name)s] %(levelname)s %(message)s"


def configure_logging(verbose: bool) -> None:
    """Send ``mpa`` log records to stderr.

    INFO and above normally; DEBUG with ``--verbose``.
    """
    logger = logging.getLogger("mpa")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def load_default_data(path: str | None) -> dict[str, Any]:
    """Read the ``--data`` JSON file; exits with status 1 when invalid."""
    if path is None:
        return {}
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Error: cannot load default data from {path}: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    if not isinstance(data, dict):
        print(f"Error: {path} must contain a JSON object", file=sys.stderr)
        raise SystemExit(1)
    return data


def plugin_config(args: argparse.Namespace, **overrides: Any) -> MpaConfig:
    """Build an :class:`MpaConfig` from shared CLI options."""
    options: dict[str, Any] = {
        "nested": not args.no_nested,
        "verbose": args.verbose,
        "default_data": load_default_data(args.data),
    }
    if args.pages_dir is not None:
        options["pages_dir"] = args.pages_dir
    if args.template is not None:
        options["template"] = args.template
    options.update(overrides)
    return MpaConfig(**options)
