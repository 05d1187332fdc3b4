"""Core interfaces and abstractions for gitsemver."""

from gitsemver.core.interfaces import Commit, RepositoryView, Tag

__all__ = ["Commit", "RepositoryView", "Tag"]
