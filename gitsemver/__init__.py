"""Semantic versions computed from git history, branch rules and a cache."""

__version__ = "0.1.0"

# Imported after __version__: the cache key module reads it
from gitsemver.model.variables import VersionVariables  # noqa: E402
from gitsemver.versioning.calculator import (  # noqa: E402
    VersionCalculator,
    VersionOptions,
    compute_version,
)

__all__ = [
    "VersionCalculator",
    "VersionOptions",
    "VersionVariables",
    "compute_version",
]
