"""
Increment calculation.

Walks the commits between the version source (exclusive) and the current
commit (inclusive), picks the strongest bump directive found in their
messages, falls back to the branch's increment policy, and applies the
branch's pre-release label and number to the result.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from gitsemver.constants import (
    CommitMessageIncrementMode,
    IncrementStrategy,
    VersioningMode,
    VersionSourceKind,
)
from gitsemver.core.interfaces import Commit, RepositoryView
from gitsemver.versioning.resolver import EffectiveConfig
from gitsemver.versioning.sources import VersionSource
from gitsemver.versioning.version import SemanticVersion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncrementResult:
    """The computed version and how it was derived from its source."""

    version: SemanticVersion
    increment: IncrementStrategy
    commits_since_version_source: int


def _directive_patterns(config: EffectiveConfig):
    # Strongest first: a commit carrying several directives counts as the strongest
    return [
        (IncrementStrategy.MAJOR, config.major_version_bump_message),
        (IncrementStrategy.MINOR, config.minor_version_bump_message),
        (IncrementStrategy.PATCH, config.patch_version_bump_message),
        (IncrementStrategy.NONE, config.no_bump_message),
    ]


def find_commit_increment(
    commits: Sequence[Commit], config: EffectiveConfig
) -> Optional[IncrementStrategy]:
    """
    Strongest bump directive across the given commit messages.

    Returns:
        The directive, or None when no commit carries one or message
        incrementing is disabled
    """
    if config.commit_message_incrementing == CommitMessageIncrementMode.Disabled:
        return None

    patterns = [
        (strategy, re.compile(pattern, re.IGNORECASE | re.MULTILINE))
        for strategy, pattern in _directive_patterns(config)
        if pattern
    ]

    strongest = None
    for commit in commits:
        for strategy, pattern in patterns:
            if pattern.search(commit.message):
                logger.debug(
                    f"Commit {commit.sha[:7]} carries a {strategy.value} bump directive"
                )
                if strongest is None or strategy.weight > strongest.weight:
                    strongest = strategy
                break
        if strongest == IncrementStrategy.MAJOR:
            break
    return strongest


def determine_increment(
    commits: Sequence[Commit], config: EffectiveConfig
) -> IncrementStrategy:
    """The directive found in the commits, else the branch's increment policy."""
    directive = find_commit_increment(commits, config)
    if directive is not None:
        return directive
    return config.increment


def apply_increment(
    source: VersionSource, increment: IncrementStrategy
) -> SemanticVersion:
    """
    Bump the source's base version.

    Nothing is bumped when the source disallows incrementing or when the base
    version already is a pre-release of the upcoming version.
    """
    base = source.base_version
    if not source.should_increment:
        return base
    if base.has_pre_release:
        return base
    return base.increment(increment)


def _pre_release_label(config: EffectiveConfig) -> str:
    if config.pre_release_label:
        return config.pre_release_label
    if config.mode == VersioningMode.ContinuousDeployment:
        return config.continuous_delivery_fallback_tag
    return ""


def apply_pre_release(
    version: SemanticVersion,
    config: EffectiveConfig,
    commits_since: int,
) -> SemanticVersion:
    """Attach the branch's pre-release label/number and commit-count build metadata."""
    label = _pre_release_label(config)
    if label:
        number = commits_since
        # Continue counting from a pre-release of the same label
        if (
            version.pre_release_label == label
            and version.pre_release_number is not None
        ):
            number += version.pre_release_number
        version = version.with_pre_release(label, number)
    else:
        version = version.with_pre_release(None, None)

    if config.mode == VersioningMode.ContinuousDelivery and commits_since > 0:
        return version.with_build_metadata(str(commits_since))
    return version.with_build_metadata(None)


def calculate_increment(
    repository: RepositoryView, source: VersionSource, config: EffectiveConfig
) -> IncrementResult:
    """
    Compute the version of the current commit from its version source.

    Args:
        repository: Repository being versioned
        source: Selected version source
        config: Effective configuration of the current branch

    Returns:
        IncrementResult with the final version and the commits walked
    """
    head = repository.current_commit()
    commits: List[Commit] = []
    if source.source_sha != head.sha:
        commits = repository.commits_between(source.source_sha, head.sha)
    commits_since = len(commits)

    if source.kind == VersionSourceKind.TAG and source.source_sha == head.sha:
        logger.debug(f"Current commit is tagged {source.base_version}")
        return IncrementResult(source.base_version, IncrementStrategy.NONE, 0)

    increment = determine_increment(commits, config)
    version = apply_increment(source, increment)
    version = apply_pre_release(version, config, commits_since)
    logger.debug(
        f"Applied {increment.value} increment over {commits_since} commits: {version}"
    )
    return IncrementResult(version, increment, commits_since)
