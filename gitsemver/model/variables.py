"""Pydantic model of the produced version variables."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VersionVariables(BaseModel):
    """
    Every value a consumer of a computed version may need.

    Values are strings, as they appear in the cache file and in generated
    build files; a variable that does not apply to a computation is None and
    is left out when serialized.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    major: Optional[str] = Field(None, alias="Major")
    minor: Optional[str] = Field(None, alias="Minor")
    patch: Optional[str] = Field(None, alias="Patch")
    pre_release_tag: Optional[str] = Field(None, alias="PreReleaseTag")
    pre_release_tag_with_dash: Optional[str] = Field(
        None, alias="PreReleaseTagWithDash"
    )
    pre_release_label: Optional[str] = Field(None, alias="PreReleaseLabel")
    pre_release_number: Optional[str] = Field(None, alias="PreReleaseNumber")
    weighted_pre_release_number: Optional[str] = Field(
        None, alias="WeightedPreReleaseNumber"
    )
    build_meta_data: Optional[str] = Field(None, alias="BuildMetaData")
    build_meta_data_padded: Optional[str] = Field(None, alias="BuildMetaDataPadded")
    full_build_meta_data: Optional[str] = Field(None, alias="FullBuildMetaData")
    major_minor_patch: Optional[str] = Field(None, alias="MajorMinorPatch")
    sem_ver: Optional[str] = Field(None, alias="SemVer")
    legacy_sem_ver: Optional[str] = Field(None, alias="LegacySemVer")
    legacy_sem_ver_padded: Optional[str] = Field(None, alias="LegacySemVerPadded")
    assembly_sem_ver: Optional[str] = Field(None, alias="AssemblySemVer")
    assembly_sem_file_ver: Optional[str] = Field(None, alias="AssemblySemFileVer")
    full_sem_ver: Optional[str] = Field(None, alias="FullSemVer")
    informational_version: Optional[str] = Field(None, alias="InformationalVersion")
    branch_name: Optional[str] = Field(None, alias="BranchName")
    escaped_branch_name: Optional[str] = Field(None, alias="EscapedBranchName")
    sha: Optional[str] = Field(None, alias="Sha")
    short_sha: Optional[str] = Field(None, alias="ShortSha")
    nuget_version_v2: Optional[str] = Field(None, alias="NuGetVersionV2")
    nuget_version: Optional[str] = Field(None, alias="NuGetVersion")
    nuget_pre_release_tag_v2: Optional[str] = Field(
        None, alias="NuGetPreReleaseTagV2"
    )
    nuget_pre_release_tag: Optional[str] = Field(None, alias="NuGetPreReleaseTag")
    version_source_sha: Optional[str] = Field(None, alias="VersionSourceSha")
    commits_since_version_source: Optional[str] = Field(
        None, alias="CommitsSinceVersionSource"
    )
    commits_since_version_source_padded: Optional[str] = Field(
        None, alias="CommitsSinceVersionSourcePadded"
    )
    uncommitted_changes: Optional[str] = Field(None, alias="UncommittedChanges")
    commit_date: Optional[str] = Field(None, alias="CommitDate")
    # Path of the cache file the values were read from or written to
    file_name: Optional[str] = Field(None, alias="FileName", exclude=True)

    @field_validator("*", mode="before")
    @classmethod
    def to_string(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if isinstance(v, (list, dict, tuple, set)):
            raise ValueError("version variables must be scalar values")
        if isinstance(v, bool):
            v = str(v).lower()
        text = str(v)
        return text if text != "" else None

    def __getitem__(self, name: str) -> Optional[str]:
        """Look up a variable by its wire name, e.g. variables["SemVer"]."""
        for field_name, field in type(self).model_fields.items():
            if field.alias == name or field_name == name:
                return getattr(self, field_name)
        raise KeyError(name)

    @classmethod
    def variable_names(cls) -> List[str]:
        """Wire names of all variables, in declaration order."""
        return [field.alias or name for name, field in cls.model_fields.items()]

    def to_dict(self, include_file_name: bool = False) -> Dict[str, str]:
        """Applicable variables keyed by wire name."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        if include_file_name and self.file_name is not None:
            data["FileName"] = self.file_name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionVariables":
        """Build from a mapping keyed by wire name; unknown keys are ignored."""
        return cls.model_validate(data)

    def with_file_name(self, file_name: Any) -> "VersionVariables":
        # model_copy skips validation
        value = str(file_name) if file_name else None
        return self.model_copy(update={"file_name": value})
