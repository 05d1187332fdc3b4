"""Application settings: where dynamic repositories and version caches live"""

import configparser
import logging
import os
import platform
from pathlib import Path
from typing import Any, Optional

from gitsemver.constants import CACHE_DIR_NAME

logger = logging.getLogger(__name__)

APP_NAME = "gitsemver"

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")
xdg_cache_home = os.environ.get("XDG_CACHE_HOME") or os.path.join(_home, ".cache")


default_cfg = {
    "dirs": {"dynamic_repositories": os.path.join(xdg_cache_home, APP_NAME, "repos")}
}

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/gitsemver").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


def get_config_file():
    return config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """
    A dict-like accessor for the application settings file.

    Missing files, sections or keys are not errors; callers pass a default.

    Usage:
        settings = ConfigAccessor()
        value = settings.get('dirs', 'version_cache', default=None)
    """

    def __init__(self, config_path: Optional[Path] = None):
        if config_path is None:
            self.config_path = get_config_file()
        else:
            self.config_path = config_path

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            try:
                self.config.read(self.config_path)
            except configparser.Error as e:
                logger.warning(
                    f"Ignoring unreadable settings file {self.config_path}: {e}"
                )
                self.config = configparser.ConfigParser()

    def get(self, section: str, key: str, default: Any = None) -> Any:
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default


# Create a global settings accessor instance
config = ConfigAccessor()


def get_dynamic_repositories_dir(settings: Optional[ConfigAccessor] = None) -> Path:
    """
    Get the directory holding mirrors of dynamically fetched repositories.

    Returns:
        Path (defaults to $XDG_CACHE_HOME/gitsemver/repos)
    """
    settings = settings or config
    location = settings.get(
        "dirs", "dynamic_repositories", default_cfg["dirs"]["dynamic_repositories"]
    )
    return Path(location).expanduser()


def get_version_cache_dir(
    git_dir: Path, settings: Optional[ConfigAccessor] = None
) -> Path:
    """
    Get the directory holding cached version variables for a repository.

    A `[dirs] version_cache` setting relocates all caches; otherwise each
    repository keeps its cache inside its own git directory.
    """
    settings = settings or config
    location = settings.get("dirs", "version_cache", default=None)
    if location:
        return Path(location).expanduser()
    return Path(git_dir) / CACHE_DIR_NAME
