"""Content-derived fingerprints for version cache entries."""

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Optional

from gitsemver import __version__
from gitsemver.core.interfaces import RepositoryView
from gitsemver.git.dynamic import parse_repo_url
from gitsemver.model.config import ConfigDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheKey:
    """Opaque sha256 hex fingerprint of repository, branch and configuration state."""

    value: str

    def __str__(self) -> str:
        return self.value


def repository_identity(
    repository: RepositoryView, target_url: Optional[str] = None
) -> str:
    """
    Location-independent name of the repository being versioned.

    A dynamic target URL wins over the origin remote; a repository with
    neither has the empty identity.
    """
    url = target_url or repository.remote_url() or ""
    return parse_repo_url(url) if url else ""


def create_cache_key(
    repository: RepositoryView,
    document: ConfigDocument,
    target_url: Optional[str] = None,
) -> CacheKey:
    """
    Fingerprint the state a version computation depends on.

    The key covers the engine version, the repository identity, the branch,
    the current commit, every tag, the configuration document's content and
    the dirty flag. Filesystem paths never take part, so the same logical
    state yields the same key wherever the repository lives.
    """
    head = repository.current_commit()
    tags = sorted(f"{tag.name}={tag.target}" for tag in repository.tags())
    config_hash = hashlib.sha256(document.canonical_json().encode()).hexdigest()

    fingerprint = {
        "engine": __version__,
        "repository": repository_identity(repository, target_url),
        "branch": repository.current_branch(),
        "head": head.sha,
        "tags": tags,
        "config": config_hash,
        "dirty": repository.is_dirty(),
    }
    canonical = json.dumps(fingerprint, sort_keys=True)
    key = CacheKey(hashlib.sha256(canonical.encode()).hexdigest())
    logger.debug(f"Cache key {key} for {fingerprint['branch']} at {head.sha[:7]}")
    return key
