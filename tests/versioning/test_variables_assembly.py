"""Tests for rendering a computed version into version variables."""

from datetime import datetime, timezone

import pytest

from gitsemver.constants import AssemblyVersioningScheme
from gitsemver.core.interfaces import Commit
from gitsemver.model.config import ConfigDocument
from gitsemver.versioning.resolver import resolve_effective_config
from gitsemver.versioning.variables import (
    assemble_version_variables,
    format_assembly_version,
)
from gitsemver.versioning.version import SemanticVersion

HEAD = Commit(
    sha="dd2a29aff0c948e1bdf3dabbe13e1576e70d5f4f",
    message="change",
    date=datetime(2024, 3, 5, 10, 30, tzinfo=timezone.utc),
)
SOURCE_SHA = "4ef5a6b7c8d9e0f1a2b3c4d5e6f708192a3b4c5d"


@pytest.mark.short
class TestAssemblyVersion:
    @pytest.mark.parametrize(
        "scheme,expected",
        [
            (AssemblyVersioningScheme.MajorMinorPatchTag, "1.2.3.4"),
            (AssemblyVersioningScheme.MajorMinorPatch, "1.2.3.0"),
            (AssemblyVersioningScheme.MajorMinor, "1.2.0.0"),
            (AssemblyVersioningScheme.Major, "1.0.0.0"),
            (AssemblyVersioningScheme.NoScheme, None),
        ],
    )
    def test_schemes(self, scheme, expected):
        version = SemanticVersion.parse("1.2.3-beta.4")
        assert format_assembly_version(version, scheme) == expected


@pytest.mark.short
class TestAssemble:
    def test_release_branch_variables(self):
        config = resolve_effective_config(None, "release/1.2.0")
        version = SemanticVersion.parse("1.2.0-beta.3+3")
        variables = assemble_version_variables(version, config, HEAD, SOURCE_SHA, 3)

        assert variables["Major"] == "1"
        assert variables["Minor"] == "2"
        assert variables["Patch"] == "0"
        assert variables["PreReleaseTag"] == "beta.3"
        assert variables["PreReleaseTagWithDash"] == "-beta.3"
        assert variables["PreReleaseLabel"] == "beta"
        assert variables["PreReleaseNumber"] == "3"
        assert variables["WeightedPreReleaseNumber"] == "30003"
        assert variables["BuildMetaData"] == "3"
        assert variables["BuildMetaDataPadded"] == "0003"
        assert variables["MajorMinorPatch"] == "1.2.0"
        assert variables["SemVer"] == "1.2.0-beta.3"
        assert variables["LegacySemVer"] == "1.2.0-beta3"
        assert variables["LegacySemVerPadded"] == "1.2.0-beta0003"
        assert variables["AssemblySemVer"] == "1.2.0.0"
        assert variables["AssemblySemFileVer"] == "1.2.0.0"
        assert variables["FullSemVer"] == "1.2.0-beta.3+3"
        assert variables["FullBuildMetaData"] == f"3.Branch.release-1-2-0.Sha.{HEAD.sha}"
        assert (
            variables["InformationalVersion"]
            == f"1.2.0-beta.3+3.Branch.release-1-2-0.Sha.{HEAD.sha}"
        )
        assert variables["BranchName"] == "release/1.2.0"
        assert variables["EscapedBranchName"] == "release-1-2-0"
        assert variables["Sha"] == HEAD.sha
        assert variables["ShortSha"] == "dd2a29a"
        assert variables["NuGetVersionV2"] == "1.2.0-beta0003"
        assert variables["NuGetPreReleaseTagV2"] == "beta0003"
        assert variables["VersionSourceSha"] == SOURCE_SHA
        assert variables["CommitsSinceVersionSource"] == "3"
        assert variables["CommitsSinceVersionSourcePadded"] == "0003"
        assert variables["UncommittedChanges"] == "false"
        assert variables["CommitDate"] == "2024-03-05"

    def test_release_version_omits_inapplicable_values(self):
        config = resolve_effective_config(None, "main")
        variables = assemble_version_variables(
            SemanticVersion(1, 0, 0), config, HEAD, HEAD.sha, 0, True
        )
        data = variables.to_dict()
        for name in (
            "PreReleaseTag",
            "PreReleaseTagWithDash",
            "PreReleaseLabel",
            "PreReleaseNumber",
            "WeightedPreReleaseNumber",
            "BuildMetaData",
            "BuildMetaDataPadded",
        ):
            assert name not in data
        assert data["FullSemVer"] == "1.0.0"
        assert data["LegacySemVerPadded"] == "1.0.0"
        assert data["NuGetVersion"] == "1.0.0"
        assert data["UncommittedChanges"] == "true"

    def test_configured_formats(self):
        document = ConfigDocument.from_yaml(
            """
assembly-versioning-scheme: MajorMinor
assembly-file-versioning-scheme: MajorMinorPatchTag
commit-date-format: "%Y%m%d"
legacy-semver-padding: 2
commits-since-version-source-padding: 6
"""
        )
        config = resolve_effective_config(document, "develop")
        version = SemanticVersion.parse("2.1.0-alpha.7")
        variables = assemble_version_variables(version, config, HEAD, SOURCE_SHA, 7)
        assert variables["AssemblySemVer"] == "2.1.0.0"
        assert variables["AssemblySemFileVer"] == "2.1.0.7"
        assert variables["CommitDate"] == "20240305"
        assert variables["LegacySemVerPadded"] == "2.1.0-alpha07"
        assert variables["CommitsSinceVersionSourcePadded"] == "000007"
        # develop carries no pre-release weight
        assert variables["WeightedPreReleaseNumber"] == "7"
