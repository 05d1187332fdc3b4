"""
Exception classes for version calculation.
"""

from pathlib import Path
from typing import Optional, Union


class VersioningError(Exception):
    """Base exception for all versioning-related errors."""

    pass


class RepositoryNotFoundError(VersioningError):
    """Raised when no git repository can be found from the working directory."""

    def __init__(self, path: Union[str, Path, None]):
        self.path = path
        super().__init__(f"Can't find the .git directory in {path}")


class ConfigError(VersioningError):
    """Raised when a configuration document is malformed or semantically invalid."""

    def __init__(self, message: str, config_file: Optional[Path] = None):
        self.config_file = config_file
        if config_file is not None:
            super().__init__(f"Invalid configuration in {config_file}: {message}")
        else:
            super().__init__(f"Invalid configuration: {message}")


class CacheReadError(VersioningError):
    """Raised when a cache entry exists but cannot be read or parsed."""

    def __init__(self, cache_file: Path, message: str):
        self.cache_file = cache_file
        super().__init__(f"Unable to read cache file {cache_file}: {message}")


class CacheWriteError(VersioningError):
    """Raised when a cache entry cannot be persisted."""

    def __init__(self, cache_file: Path, message: str):
        self.cache_file = cache_file
        super().__init__(f"Unable to write cache file {cache_file}: {message}")


class RepositoryFetchTimeout(VersioningError):
    """Raised when cloning or fetching a dynamic repository exceeds its deadline."""

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Fetching {url} did not complete within {timeout} seconds")
