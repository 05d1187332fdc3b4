"""
On-disk version cache.

One file per cache key, ``<cache dir>/<key>.yml``, holding ``Key: Value``
lines of the computed VersionVariables:

    .git/gitsemver_cache/
    ├── 3f1c...e9.yml
    └── 3f1c...e9.yml.lock      # held only while an entry is written

Entries are written to a temporary file and renamed into place, so readers
never see a partial entry and need no lock. Anything unreadable is a miss:
the cache is an optimization, never a requirement.
"""

import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml
from filelock import FileLock, Timeout

from gitsemver import __version__
from gitsemver.cache.key import CacheKey
from gitsemver.constants import CACHE_FILE_SUFFIX
from gitsemver.model.variables import VersionVariables
from gitsemver.versioning.exceptions import CacheReadError, CacheWriteError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("Major", "Minor", "Patch", "Sha")

_PLAIN_VALUE = re.compile(r"^-?[A-Za-z0-9_.+/][A-Za-z0-9_.+/:-]*$")


def _format_value(value: str) -> str:
    # Quote anything YAML would not read back as the same plain string
    if _PLAIN_VALUE.match(value) and not value.endswith(":"):
        return value
    return "'" + value.replace("'", "''") + "'"


def serialize_variables(variables: VersionVariables) -> str:
    """Render variables as ``Key: Value`` lines; FileName is never written."""
    written_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
    lines = [f"# gitsemver {__version__}, written {written_at}"]
    for name, value in variables.to_dict().items():
        lines.append(f"{name}: {_format_value(value)}")
    return "\n".join(lines) + "\n"


class VersionCache:
    """
    Key-value store of VersionVariables in a cache directory.

    Args:
        cache_dir: Directory holding the entries (created on first write)
        lock_timeout: Seconds to wait for another writer of the same key
    """

    def __init__(self, cache_dir: Path, lock_timeout: float = 10):
        self.cache_dir = Path(cache_dir)
        self.lock_timeout = lock_timeout

    def cache_file(self, key: CacheKey) -> Path:
        return self.cache_dir / f"{key.value}{CACHE_FILE_SUFFIX}"

    def ensure_directory(self) -> bool:
        """Create the cache directory; False when it cannot be created."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(
                f"Cannot create version cache directory {self.cache_dir}: {e}. "
                "Caching is disabled for this run."
            )
            return False
        return True

    def is_stale(self, config_file: Optional[Path]) -> bool:
        """Whether the configuration file changed after the cache directory did."""
        if config_file is None:
            return False
        try:
            config_mtime = Path(config_file).stat().st_mtime_ns
            cache_mtime = self.cache_dir.stat().st_mtime_ns
        except OSError:
            return False
        return config_mtime > cache_mtime

    def read(self, key: CacheKey) -> VersionVariables:
        """
        Parse the entry for a key.

        Raises:
            CacheReadError: If the entry is unreadable, malformed or incomplete
        """
        path = self.cache_file(key)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CacheReadError(path, str(e)) from e

        try:
            # BaseLoader keeps every scalar a string ("4", "true", "0001")
            data = yaml.load(text, Loader=yaml.BaseLoader)
        except yaml.YAMLError as e:
            raise CacheReadError(path, f"cannot parse YAML: {e}") from e

        if not isinstance(data, dict):
            raise CacheReadError(path, "expected Key: Value lines")
        missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
        if missing:
            raise CacheReadError(path, f"missing {', '.join(missing)}")
        for name in ("Major", "Minor", "Patch"):
            if not str(data[name]).isdigit():
                raise CacheReadError(path, f"{name} is not a number: {data[name]}")

        try:
            variables = VersionVariables.from_dict(data)
        except ValueError as e:
            raise CacheReadError(path, str(e)) from e
        return variables.with_file_name(path)

    def lookup(
        self, key: CacheKey, config_file: Optional[Path] = None
    ) -> Optional[VersionVariables]:
        """
        Cached variables for a key, or None on a miss.

        An entry is a miss when absent, unreadable, or older than the
        configuration file.
        """
        path = self.cache_file(key)
        try:
            if not path.is_file():
                return None
        except OSError as e:
            logger.warning(f"Cannot access version cache entry {path}: {e}")
            return None

        if self.is_stale(config_file):
            logger.info(
                f"Configuration file {config_file} changed after the version cache "
                "was written, invalidating cached entry"
            )
            return None

        try:
            return self.read(key)
        except CacheReadError as e:
            logger.warning(f"{e}. Recomputing.")
            return None

    def _write(self, path: Path, content: str) -> None:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=self.cache_dir
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def store(self, key: CacheKey, variables: VersionVariables) -> VersionVariables:
        """
        Persist variables under a key.

        Write failures are logged and swallowed.

        Returns:
            The variables with FileName set to the entry path
        """
        path = self.cache_file(key)
        if not self.ensure_directory():
            return variables

        try:
            try:
                with FileLock(f"{path}.lock", timeout=self.lock_timeout):
                    self._write(path, serialize_variables(variables))
            except Timeout as e:
                raise CacheWriteError(path, f"lock not acquired: {e}") from e
            except OSError as e:
                raise CacheWriteError(path, str(e)) from e
        except CacheWriteError as e:
            logger.warning(f"{e}. Continuing without caching.")
            return variables

        logger.debug(f"Wrote version cache entry {path}")
        return variables.with_file_name(path)
