"""Bundler boundary.

mpa does not bundle.  A bundler receives the staged inputs
(``{page name: scratch HTML path}``) and writes its output under
``out_dir``.  HTML inputs keep their root-relative location, so staged
pages land in ``<out_dir>/.mpa-temp/`` and are then relocated by
:meth:`~mpa.build.staging.StagingPipeline.relocate`.

``CopyBundler`` is the built-in stand-in: it copies each HTML input and
every root-relative module script the HTML references, unchanged.
Plug in a real bundler by passing any callable matching
:class:`Bundler` to :func:`mpa.host.build`.
"""

import logging
import re
import shutil
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

import anyio
import anyio.to_thread

logger = logging.getLogger("mpa.build")

# <script ... src="/path"> with a root-relative src
_SCRIPT_SRC_RE = re.compile(r"""<script\b[^>]*\bsrc=["'](/[^"'?#]+)[^"']*["']""", re.IGNORECASE)


class Bundler(Protocol):
    """Anything that turns staged HTML inputs into files under *out_dir*."""

    async def __call__(self, inputs: Mapping[str, Path], root: Path, out_dir: Path) -> None: ...


def referenced_scripts(html: str) -> list[str]:
    """Root-relative script URLs referenced by *html*, in document order."""
    return _SCRIPT_SRC_RE.findall(html)


class CopyBundler:
    """Copy staged HTML and its module scripts into the output directory."""

    __slots__ = ()

    async def __call__(self, inputs: Mapping[str, Path], root: Path, out_dir: Path) -> None:
        root = Path(await anyio.Path(root).resolve())
        out_dir = Path(await anyio.Path(out_dir).resolve())
        copied: set[Path] = set()

        for name, source in inputs.items():
            relative = Path(await anyio.Path(source).resolve()).relative_to(root)
            html = await anyio.Path(source).read_text(encoding="utf-8")
            await self._copy(Path(source), out_dir / relative)
            logger.debug("Bundled %s -> %s", name, out_dir / relative)

            for src in referenced_scripts(html):
                script = Path(await anyio.Path(root / src.lstrip("/")).resolve())
                if script in copied or not script.is_relative_to(root):
                    continue
                if not await anyio.Path(script).is_file():
                    logger.warning("Entry script not found for %s: %s", name, src)
                    continue
                await self._copy(script, out_dir / script.relative_to(root))
                copied.add(script)

        logger.info("Bundled %d inputs into %s", len(inputs), out_dir)

    @staticmethod
    async def _copy(source: Path, target: Path) -> None:
        await anyio.Path(target.parent).mkdir(parents=True, exist_ok=True)
        await anyio.to_thread.run_sync(shutil.copyfile, source, target)
