"""Version cache: content-derived keys and the on-disk store."""

from .key import CacheKey, create_cache_key
from .store import VersionCache

__all__ = ["CacheKey", "VersionCache", "create_cache_key"]
