"""Rendering of a computed version into VersionVariables."""

from typing import Optional

from gitsemver.constants import SHORT_SHA_LENGTH, AssemblyVersioningScheme
from gitsemver.core.interfaces import Commit
from gitsemver.model.variables import VersionVariables
from gitsemver.versioning.resolver import EffectiveConfig, escape_branch_name
from gitsemver.versioning.version import SemanticVersion


def format_assembly_version(
    version: SemanticVersion, scheme: AssemblyVersioningScheme
) -> Optional[str]:
    """
    Four-part assembly version for a scheme.

    Examples (version 1.2.3-beta.4):
        MajorMinorPatchTag -> 1.2.3.4
        MajorMinorPatch -> 1.2.3.0
        MajorMinor -> 1.2.0.0
        Major -> 1.0.0.0
        None -> None
    """
    if scheme == AssemblyVersioningScheme.MajorMinorPatchTag:
        return f"{version.major_minor_patch}.{version.pre_release_number or 0}"
    if scheme == AssemblyVersioningScheme.MajorMinorPatch:
        return f"{version.major_minor_patch}.0"
    if scheme == AssemblyVersioningScheme.MajorMinor:
        return f"{version.major}.{version.minor}.0.0"
    if scheme == AssemblyVersioningScheme.Major:
        return f"{version.major}.0.0.0"
    return None


def _padded(value: Optional[str], padding: int) -> Optional[str]:
    if value is None or not value.isdigit():
        return value
    return value.zfill(padding)


def _legacy_sem_ver(version: SemanticVersion, padding: int) -> str:
    tag = version.legacy_pre_release_tag(padding)
    if not tag:
        return version.major_minor_patch
    return f"{version.major_minor_patch}-{tag}"


def assemble_version_variables(
    version: SemanticVersion,
    config: EffectiveConfig,
    head: Commit,
    version_source_sha: str,
    commits_since_version_source: int,
    uncommitted_changes: bool = False,
) -> VersionVariables:
    """
    Render every version variable of a computation.

    Args:
        version: Final version of the current commit
        config: Effective configuration of the current branch
        head: The commit being versioned
        version_source_sha: Sha of the version source commit
        commits_since_version_source: Number of commits walked
        uncommitted_changes: Whether the working tree is dirty

    Returns:
        Immutable VersionVariables
    """
    escaped_branch = escape_branch_name(config.branch_name)
    pre_release_tag = version.pre_release_tag
    build = version.build_metadata

    full_build = f"Branch.{escaped_branch}.Sha.{head.sha}"
    if build:
        full_build = f"{build}.{full_build}"

    weighted = None
    if version.pre_release_number is not None:
        weighted = version.pre_release_number + config.pre_release_weight

    legacy_padded_tag = version.legacy_pre_release_tag(config.legacy_semver_padding)
    nuget_tag = legacy_padded_tag.lower()
    nuget_version = version.major_minor_patch
    if nuget_tag:
        nuget_version = f"{nuget_version}-{nuget_tag}"

    full_sem_ver = f"{version.sem_ver}+{build}" if build else version.sem_ver

    return VersionVariables(
        Major=version.major,
        Minor=version.minor,
        Patch=version.patch,
        PreReleaseTag=pre_release_tag,
        PreReleaseTagWithDash=f"-{pre_release_tag}" if pre_release_tag else None,
        PreReleaseLabel=version.pre_release_label,
        PreReleaseNumber=version.pre_release_number,
        WeightedPreReleaseNumber=weighted,
        BuildMetaData=build,
        BuildMetaDataPadded=_padded(build, config.build_metadata_padding),
        FullBuildMetaData=full_build,
        MajorMinorPatch=version.major_minor_patch,
        SemVer=version.sem_ver,
        LegacySemVer=_legacy_sem_ver(version, 0),
        LegacySemVerPadded=_legacy_sem_ver(version, config.legacy_semver_padding),
        AssemblySemVer=format_assembly_version(
            version, config.assembly_versioning_scheme
        ),
        AssemblySemFileVer=format_assembly_version(
            version, config.assembly_file_versioning_scheme
        ),
        FullSemVer=full_sem_ver,
        InformationalVersion=f"{version.sem_ver}+{full_build}",
        BranchName=config.branch_name,
        EscapedBranchName=escaped_branch,
        Sha=head.sha,
        ShortSha=head.sha[:SHORT_SHA_LENGTH],
        NuGetVersionV2=nuget_version,
        NuGetVersion=nuget_version,
        NuGetPreReleaseTagV2=nuget_tag,
        NuGetPreReleaseTag=nuget_tag,
        VersionSourceSha=version_source_sha,
        CommitsSinceVersionSource=commits_since_version_source,
        CommitsSinceVersionSourcePadded=str(commits_since_version_source).zfill(
            config.commits_since_version_source_padding
        ),
        UncommittedChanges=uncommitted_changes,
        CommitDate=head.date.strftime(config.commit_date_format),
    )
