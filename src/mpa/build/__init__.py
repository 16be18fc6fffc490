"""Build-mode staging, bundler boundary and output relocation."""

from mpa.build.bundler import Bundler, CopyBundler
from mpa.build.staging import StagingPipeline

__all__ = ["Bundler", "CopyBundler", "StagingPipeline"]
