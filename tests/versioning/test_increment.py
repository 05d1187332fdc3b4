"""Tests for increment calculation over real git histories."""

from datetime import datetime, timezone

import pytest

from gitsemver.constants import IncrementStrategy, VersionSourceKind
from gitsemver.core.interfaces import Commit
from gitsemver.git.repository import GitRepository
from gitsemver.model.config import ConfigDocument
from gitsemver.versioning.increment import (
    apply_pre_release,
    calculate_increment,
    find_commit_increment,
)
from gitsemver.versioning.resolver import resolve_effective_config
from gitsemver.versioning.sources import locate_version_source
from gitsemver.versioning.version import SemanticVersion


def compute(builder, yaml_text: str = ""):
    repository = GitRepository(builder.path)
    document = ConfigDocument.from_yaml(yaml_text) if yaml_text else None
    config = resolve_effective_config(document, repository.current_branch())
    source = locate_version_source(repository, config)
    return source, calculate_increment(repository, source, config)


def message_commit(message: str) -> Commit:
    return Commit(sha="a" * 40, message=message, date=datetime.now(timezone.utc))


@pytest.mark.short
class TestDirectives:
    def test_strongest_directive_wins(self):
        config = resolve_effective_config(None, "main")
        commits = [
            message_commit("fix: typo +semver: patch"),
            message_commit("new api\n\n+semver: minor"),
            message_commit("+semver: none"),
        ]
        assert find_commit_increment(commits, config) == IncrementStrategy.MINOR

    def test_major_aliases(self):
        config = resolve_effective_config(None, "main")
        commits = [message_commit("drop python 2 +semver: breaking")]
        assert find_commit_increment(commits, config) == IncrementStrategy.MAJOR

    def test_no_directive(self):
        config = resolve_effective_config(None, "main")
        assert find_commit_increment([message_commit("refactor")], config) is None

    def test_disabled(self):
        document = ConfigDocument.from_yaml("commit-message-incrementing: Disabled")
        config = resolve_effective_config(document, "main")
        commits = [message_commit("+semver: major")]
        assert find_commit_increment(commits, config) is None

    def test_custom_pattern(self):
        document = ConfigDocument.from_yaml("major-version-bump-message: BREAKING")
        config = resolve_effective_config(document, "main")
        commits = [message_commit("feat!: BREAKING api change")]
        assert find_commit_increment(commits, config) == IncrementStrategy.MAJOR


@pytest.mark.short
class TestPreRelease:
    def test_delivery_mode_puts_commit_count_in_build_metadata(self):
        config = resolve_effective_config(None, "main")
        version = apply_pre_release(SemanticVersion(1, 0, 1), config, 3)
        assert str(version) == "1.0.1+3"
        assert version.sem_ver == "1.0.1"

    def test_deployment_mode_counts_pre_release_number(self):
        config = resolve_effective_config(None, "develop")
        version = apply_pre_release(SemanticVersion(1, 1, 0), config, 4)
        assert str(version) == "1.1.0-alpha.4"

    def test_deployment_mode_fallback_label(self):
        document = ConfigDocument.from_yaml("mode: ContinuousDeployment")
        config = resolve_effective_config(document, "main")
        version = apply_pre_release(SemanticVersion(1, 0, 1), config, 2)
        assert str(version) == "1.0.1-ci.2"

    def test_same_label_continues_counting(self):
        config = resolve_effective_config(None, "release/1.0.0")
        version = apply_pre_release(SemanticVersion.parse("1.0.0-beta.2"), config, 3)
        assert version.sem_ver == "1.0.0-beta.5"


@pytest.mark.integration
class TestCommitWalk:
    def test_commits_since_tag_with_default_policy(self, repo_builder):
        repo_builder.commit("initial")
        repo_builder.tag("v1.0.0")
        repo_builder.commits(5)

        source, result = compute(repo_builder)
        assert source.kind == VersionSourceKind.TAG
        assert result.commits_since_version_source == 5
        # main's default increment is Patch
        assert result.increment == IncrementStrategy.PATCH
        assert result.version.sem_ver == "1.0.1"
        assert str(result.version) == "1.0.1+5"

    def test_directive_overrides_policy(self, repo_builder):
        repo_builder.commit("initial")
        repo_builder.tag("v1.0.0")
        repo_builder.commit("add feature +semver: minor")
        repo_builder.commit("fix it")

        _, result = compute(repo_builder)
        assert result.increment == IncrementStrategy.MINOR
        assert result.version.sem_ver == "1.1.0"
        assert result.commits_since_version_source == 2

    def test_tagged_head_is_returned_verbatim(self, repo_builder):
        repo_builder.commits(2)
        repo_builder.tag("v2.3.4-rc.1")

        _, result = compute(repo_builder)
        assert str(result.version) == "2.3.4-rc.1"
        assert result.commits_since_version_source == 0

    def test_feature_branch_label(self, repo_builder):
        repo_builder.commit("initial")
        repo_builder.tag("v1.0.0")
        repo_builder.branch("feature/login-form")
        repo_builder.commits(3)

        _, result = compute(repo_builder)
        assert result.version.sem_ver == "1.0.1-login-form.3"
        assert result.version.build_metadata == "3"

    def test_develop_branch(self, repo_builder):
        repo_builder.commit("initial")
        repo_builder.tag("v1.0.0")
        repo_builder.branch("develop")
        repo_builder.commits(2)

        _, result = compute(repo_builder)
        assert str(result.version) == "1.1.0-alpha.2"

    def test_untagged_history_never_increments(self, repo_builder):
        repo_builder.commits(4)

        source, result = compute(repo_builder)
        assert source.kind == VersionSourceKind.CONFIG_DEFAULT
        assert result.commits_since_version_source == 3
        assert result.version.sem_ver == "0.1.0"
