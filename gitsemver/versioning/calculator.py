"""
Version computation entry point.

VersionCalculator owns one computation: it opens the repository (preparing a
dynamic mirror first when a URL is given), loads the configuration, consults
the version cache and, on a miss, runs the derivation pipeline:

    effective config -> version source -> increment -> variables

Usage:
    variables = compute_version(VersionOptions(working_directory="."))
    print(variables["FullSemVer"])
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from gitsemver.cache.key import create_cache_key
from gitsemver.cache.store import VersionCache
from gitsemver.config import get_version_cache_dir
from gitsemver.git.dynamic import prepare_dynamic_repository
from gitsemver.git.repository import GitRepository
from gitsemver.model.config import ConfigDocument
from gitsemver.model.variables import VersionVariables
from gitsemver.versioning.increment import calculate_increment
from gitsemver.versioning.resolver import (
    apply_override,
    load_configuration,
    resolve_effective_config,
)
from gitsemver.versioning.sources import locate_version_source
from gitsemver.versioning.variables import assemble_version_variables

logger = logging.getLogger(__name__)


@dataclass
class VersionOptions:
    """Inputs of one version computation."""

    working_directory: Optional[Union[str, Path]] = None
    target_url: Optional[str] = None
    target_branch: Optional[str] = None
    commit_id: Optional[str] = None
    config_file: Optional[Union[str, Path]] = None
    override_config: Optional[Union[ConfigDocument, Mapping[str, Any]]] = None
    no_cache: bool = False
    no_normalize: bool = False
    cache_directory: Optional[Union[str, Path]] = None
    dynamic_repository_location: Optional[Union[str, Path]] = None
    fetch_timeout: Optional[float] = None


class VersionCalculator:
    """
    Computes the version variables of a repository, through the version cache.

    Args:
        options: What to version and how
    """

    def __init__(self, options: VersionOptions):
        self.options = options

    def _config_file(self) -> Optional[Path]:
        if self.options.config_file is None:
            return None
        return Path(self.options.config_file).expanduser()

    def _open_local(self):
        options = self.options
        repository = GitRepository(
            options.working_directory or Path.cwd(),
            target_branch=options.target_branch,
            commit_id=options.commit_id,
        )
        project_root = repository.working_tree_dir or Path(
            options.working_directory or Path.cwd()
        )
        document, config_file = load_configuration(project_root, self._config_file())
        return repository, document, config_file

    def _open_dynamic(self):
        options = self.options
        # The mirror has no working tree: configuration comes from the caller's directory
        document, config_file = load_configuration(
            Path(options.working_directory) if options.working_directory else None,
            self._config_file(),
        )
        mirror = prepare_dynamic_repository(
            options.target_url,
            target_branch=options.target_branch,
            location=options.dynamic_repository_location,
            timeout=options.fetch_timeout,
            normalize=not (options.no_normalize or document.no_normalize),
        )
        repository = GitRepository(
            mirror, target_branch=options.target_branch, commit_id=options.commit_id
        )
        return repository, document, config_file

    def compute(
        self, repository: GitRepository, document: ConfigDocument
    ) -> VersionVariables:
        """Run the derivation pipeline, bypassing the cache."""
        branch = repository.current_branch()
        head = repository.current_commit()
        logger.info(f"Computing version variables for {branch} at {head.sha}")

        config = resolve_effective_config(document, branch)
        source = locate_version_source(repository, config)
        result = calculate_increment(repository, source, config)
        return assemble_version_variables(
            result.version,
            config,
            head,
            source.source_sha,
            result.commits_since_version_source,
            repository.is_dirty(),
        )

    def calculate_version_variables(self) -> VersionVariables:
        """
        Compute (or read from the cache) the version variables.

        Raises:
            RepositoryNotFoundError: If no repository contains the working directory
            ConfigError: If the configuration document is invalid
            RepositoryFetchTimeout: If preparing a dynamic repository times out
        """
        options = self.options
        if options.target_url:
            repository, document, config_file = self._open_dynamic()
        else:
            repository, document, config_file = self._open_local()

        if options.override_config is not None:
            logger.info("Override configuration supplied, bypassing the version cache")
            return self.compute(repository, apply_override(document, options.override_config))

        if options.no_cache or document.no_cache:
            logger.info("Version cache disabled, computing version variables")
            return self.compute(repository, document)

        cache_dir = (
            Path(options.cache_directory).expanduser()
            if options.cache_directory
            else get_version_cache_dir(repository.git_dir)
        )
        cache = VersionCache(cache_dir)
        key = create_cache_key(repository, document, options.target_url)

        cached = cache.lookup(key, config_file)
        if cached is not None:
            logger.info(
                f"Deserializing version variables from cache file {cached.file_name}"
            )
            return cached

        variables = self.compute(repository, document)
        return cache.store(key, variables)


def compute_version(options: Optional[VersionOptions] = None) -> VersionVariables:
    """Compute the version variables for the given options."""
    return VersionCalculator(options or VersionOptions()).calculate_version_variables()
