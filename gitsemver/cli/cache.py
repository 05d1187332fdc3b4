"""CLI commands for version cache management"""

import sys

import click

from gitsemver.cli.utils.logging import logger
from gitsemver.config import get_dynamic_repositories_dir, get_version_cache_dir
from gitsemver.constants import CACHE_FILE_SUFFIX
from gitsemver.git.repository import GitRepository
from gitsemver.versioning.exceptions import VersioningError


def _cache_dir(path: str):
    try:
        repository = GitRepository(path)
    except VersioningError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    return get_version_cache_dir(repository.git_dir)


@click.group(name="cache")
def cache():
    """Inspect and clean the version cache."""
    pass


@cache.command("path")
@click.argument("path", type=click.Path(file_okay=False, exists=True), default=".")
def show_path(path: str):
    """Print the version cache and dynamic repository directories."""
    click.echo(f"version cache: {_cache_dir(path)}")
    click.echo(f"dynamic repositories: {get_dynamic_repositories_dir()}")


@cache.command("clear")
@click.argument("path", type=click.Path(file_okay=False, exists=True), default=".")
def clear(path: str):
    """Delete the cached version entries of the repository at PATH."""
    cache_dir = _cache_dir(path)
    if not cache_dir.is_dir():
        logger.info(f"No version cache at {cache_dir}")
        return

    removed = 0
    for entry in cache_dir.iterdir():
        if entry.name.endswith(CACHE_FILE_SUFFIX) or entry.name.endswith(".lock"):
            try:
                entry.unlink()
            except OSError as e:
                logger.warning(f"Could not remove {entry}: {e}")
                continue
            if entry.name.endswith(CACHE_FILE_SUFFIX):
                removed += 1
    logger.info(f"Removed {removed} cached version entries from {cache_dir}")
