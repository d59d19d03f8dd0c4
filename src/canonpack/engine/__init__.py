"""Pack build orchestration.

This package provides the main entry point for building a pack from a canon
root, including configuration and result types.
"""

from canonpack.engine.config import BuildConfig, BuildResult
from canonpack.engine.runner import EVENTS_FILE, run_build

__all__ = [
    "BuildConfig",
    "BuildResult",
    "EVENTS_FILE",
    "run_build",
]
