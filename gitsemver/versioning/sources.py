"""
Version source location.

A version source is the commit and base version a computation counts forward
from. Candidates come from a fixed list of strategies, each a plain function
``(repository, config) -> Optional[VersionSource]``; selection between the
candidates happens in one place, ``select_version_source``.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence

from gitsemver.constants import (
    DEFAULT_BASE_VERSION,
    SOURCE_KIND_PRIORITY,
    VersionSourceKind,
)
from gitsemver.core.interfaces import Commit, RepositoryView
from gitsemver.git.repository import normalize_branch_name
from gitsemver.versioning.resolver import EffectiveConfig
from gitsemver.versioning.version import SemanticVersion

logger = logging.getLogger(__name__)

# Merge commit message formats of common git hosts and clients.
# Bitbucket must be tried before GitHub, whose pattern also matches it.
MERGE_MESSAGE_FORMATS = (
    re.compile(r"^Merge (?:branch|tag) '(?P<source>[^']*)'(?: into (?P<target>\S*))*"),
    re.compile(r"^Merge remote-tracking branch '(?P<source>\S*)'(?: into (?P<target>\S*))*"),
    re.compile(
        r"^Merge pull request #(?P<number>\d+) (?:from|in) (?P<repo>.*) "
        r"from (?P<source>\S*) to (?P<target>\S*)"
    ),
    re.compile(
        r"^Merge pull request #(?P<number>\d+) (?:from|in) "
        r"(?:[^\s/]+/)?(?P<source>\S*)(?: into (?P<target>\S*))*"
    ),
    re.compile(
        r"^Merge pull request (?P<number>\d+) from (?P<source>\S*) into (?P<target>\S*)"
    ),
    re.compile(r"^Finish (?P<source>\S*)(?: into (?P<target>\S*))*"),
)


@dataclass(frozen=True)
class VersionSource:
    """The base version a computation counts from and the commit it comes from."""

    base_version: SemanticVersion
    source_commit: Commit
    kind: VersionSourceKind
    should_increment: bool
    description: str = ""

    @property
    def source_sha(self) -> str:
        return self.source_commit.sha


Strategy = Callable[[RepositoryView, EffectiveConfig], Optional[VersionSource]]


def _newer(candidate: VersionSource, best: Optional[VersionSource]) -> bool:
    if best is None:
        return True
    return (candidate.base_version.precedence, candidate.source_commit.date) > (
        best.base_version.precedence,
        best.source_commit.date,
    )


def tag_version_source(
    repository: RepositoryView, config: EffectiveConfig
) -> Optional[VersionSource]:
    """The highest version tag reachable from the current commit."""
    versioned_tags = []
    for tag in repository.tags():
        version = SemanticVersion.try_parse(tag.name, config.tag_prefix)
        if version is not None:
            versioned_tags.append((version, tag))
    if not versioned_tags:
        return None

    head = repository.current_commit()
    reachable = {c.sha: c for c in repository.commits_between(None, head.sha)}

    best = None
    for version, tag in versioned_tags:
        commit = reachable.get(tag.target)
        if commit is None:
            logger.debug(f"Tag {tag.name} is not reachable from {head.sha[:7]}")
            continue
        candidate = VersionSource(
            base_version=version,
            source_commit=commit,
            kind=VersionSourceKind.TAG,
            should_increment=commit.sha != head.sha,
            description=f"Git tag '{tag.name}'",
        )
        if _newer(candidate, best):
            best = candidate
    return best


def parse_merged_branch(message: str) -> Optional[str]:
    """Name of the branch a merge commit message says was merged, if any."""
    first_line = message.strip().splitlines()[0] if message.strip() else ""
    for pattern in MERGE_MESSAGE_FORMATS:
        match = pattern.match(first_line)
        if match and match.group("source"):
            return match.group("source")
    return None


def version_from_branch_name(
    branch_name: str, tag_prefix: Optional[str] = None
) -> Optional[SemanticVersion]:
    """
    Extract the version a branch name encodes.

    Examples:
        release/1.2.0 -> 1.2.0
        origin/hotfix-2.0.1 -> 2.0.1
        feature/login -> None
    """
    name = normalize_branch_name(branch_name)
    prefix = f"(?:{tag_prefix})?" if tag_prefix else ""
    matches = re.findall(rf"(?:^|[/-]){prefix}(\d+\.\d+(?:\.\d+)?)(?=$|[/-])", name)
    if not matches:
        return None
    return SemanticVersion.try_parse(matches[-1])


def merge_message_version_source(
    repository: RepositoryView, config: EffectiveConfig
) -> Optional[VersionSource]:
    """The highest version encoded in a merged branch name reachable from the current commit."""
    head = repository.current_commit()
    best = None
    for commit in repository.commits_between(None, head.sha):
        if not commit.is_merge:
            continue
        merged_branch = parse_merged_branch(commit.message)
        if not merged_branch:
            continue
        version = version_from_branch_name(merged_branch, config.tag_prefix)
        if version is None:
            continue
        candidate = VersionSource(
            base_version=version,
            source_commit=commit,
            kind=VersionSourceKind.MERGE_MESSAGE,
            should_increment=not config.prevent_increment_of_merged_branch_version,
            description=f"Merge message '{commit.message.strip().splitlines()[0]}'",
        )
        if _newer(candidate, best):
            best = candidate
    return best


def config_default_version_source(
    repository: RepositoryView, config: EffectiveConfig
) -> Optional[VersionSource]:
    """Fallback of 0.1.0 anchored at the first commit of the history."""
    root = repository.first_commit() or repository.current_commit()
    return VersionSource(
        base_version=SemanticVersion.parse(DEFAULT_BASE_VERSION),
        source_commit=root,
        kind=VersionSourceKind.CONFIG_DEFAULT,
        should_increment=False,
        description="Fallback base version",
    )


def next_version_override(
    repository: RepositoryView, config: EffectiveConfig
) -> Optional[VersionSource]:
    """The operator's configured next-version, if any."""
    if not config.next_version:
        return None
    return VersionSource(
        base_version=SemanticVersion.parse(config.next_version),
        source_commit=repository.current_commit(),
        kind=VersionSourceKind.NEXT_VERSION_OVERRIDE,
        should_increment=False,
        description=f"next-version in configuration ({config.next_version})",
    )


DEFAULT_STRATEGIES: Sequence[Strategy] = (
    tag_version_source,
    merge_message_version_source,
    config_default_version_source,
)


def _selection_key(source: VersionSource) -> tuple:
    return (
        source.base_version.precedence,
        SOURCE_KIND_PRIORITY[source.kind],
        source.source_commit.date,
    )


def select_version_source(
    candidates: List[VersionSource], override: Optional[VersionSource] = None
) -> VersionSource:
    """
    Pick the version source among strategy candidates.

    The highest base version wins; ties prefer tags, then merge messages, then
    the configured default, then the most recent commit. A next-version
    override only raises the winner's base version: its source commit stays.
    """
    if not candidates:
        raise ValueError("No version source candidates to select from")

    winner = max(candidates, key=_selection_key)
    if override is not None and override.base_version > winner.base_version:
        winner = replace(
            winner,
            base_version=override.base_version,
            kind=VersionSourceKind.NEXT_VERSION_OVERRIDE,
            should_increment=False,
            description=override.description,
        )
    return winner


def locate_version_source(
    repository: RepositoryView,
    config: EffectiveConfig,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
) -> VersionSource:
    """Run the strategy pipeline and select the version source."""
    candidates = []
    for strategy in strategies:
        candidate = strategy(repository, config)
        if candidate is not None:
            logger.debug(
                f"{candidate.description}: {candidate.base_version} "
                f"from {candidate.source_sha[:7]}"
            )
            candidates.append(candidate)

    source = select_version_source(
        candidates, next_version_override(repository, config)
    )
    logger.info(
        f"Base version {source.base_version} ({source.description}) "
        f"from commit {source.source_sha[:7]}"
    )
    return source
