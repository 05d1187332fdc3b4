"""
Git access for gitsemver.

Architecture:
    - Inspection: GitRepository, a read-only GitPython view of a local or
      bare repository (repository.py)
    - Dynamic repositories: bare dulwich mirrors of remote URLs kept under
      ~/.cache/gitsemver/repos/{host}/{org}/{repo}/ (dynamic.py)
"""

from .repository import GitRepository, normalize_branch_name
from .dynamic import parse_repo_url, prepare_dynamic_repository

__all__ = [
    "GitRepository",
    "normalize_branch_name",
    "parse_repo_url",
    "prepare_dynamic_repository",
]
