"""Pydantic models for the gitsemver.yml configuration document."""

import json
import re
from pathlib import Path
from typing import Any, Dict, Optional, Type

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gitsemver.constants import (
    AssemblyVersioningScheme,
    CommitMessageIncrementMode,
    IncrementStrategy,
    VersioningMode,
)
from gitsemver.versioning.exceptions import ConfigError
from gitsemver.versioning.version import SemanticVersion


class _ConfigLoader(yaml.SafeLoader):
    """SafeLoader that keeps decimal scalars as written: 1.10 stays "1.10"."""


_ConfigLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:float"
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _match_enum(enum_cls: Type, value: Any) -> Any:
    """Accept enum tokens case-insensitively; anything unknown is an error."""
    if value is None or isinstance(value, enum_cls):
        return value
    token = str(value).strip().lower()
    for member in enum_cls:
        if member.value.lower() == token:
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValueError(f"unknown value '{value}', expected one of: {allowed}")


def _validate_regex(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    try:
        re.compile(v)
    except re.error as e:
        raise ValueError(f"invalid regular expression '{v}': {e}")
    return v


class BranchConfig(BaseModel):
    """Partial override of versioning settings for branches matching `regex`."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    regex: Optional[str] = Field(None, description="Branch name pattern")
    tag: Optional[str] = Field(
        None, description="Pre-release label template, may contain {BranchName}"
    )
    increment: Optional[IncrementStrategy] = None
    mode: Optional[VersioningMode] = None
    prevent_increment_of_merged_branch_version: Optional[bool] = Field(
        None, alias="prevent-increment-of-merged-branch-version"
    )
    pre_release_weight: Optional[int] = Field(None, alias="pre-release-weight", ge=0)
    commit_message_incrementing: Optional[CommitMessageIncrementMode] = Field(
        None, alias="commit-message-incrementing"
    )

    @field_validator("regex")
    @classmethod
    def validate_regex(cls, v: Optional[str]) -> Optional[str]:
        return _validate_regex(v)

    @field_validator("increment", mode="before")
    @classmethod
    def validate_increment(cls, v: Any) -> Any:
        return _match_enum(IncrementStrategy, v)

    @field_validator("mode", mode="before")
    @classmethod
    def validate_mode(cls, v: Any) -> Any:
        return _match_enum(VersioningMode, v)

    @field_validator("commit_message_incrementing", mode="before")
    @classmethod
    def validate_commit_message_incrementing(cls, v: Any) -> Any:
        return _match_enum(CommitMessageIncrementMode, v)

    @field_validator("tag", mode="before")
    @classmethod
    def validate_tag(cls, v: Any) -> Any:
        # "tag:" with no value in YAML means an explicit empty label
        return "" if v is None else str(v)


class ConfigDocument(BaseModel):
    """
    The repository's versioning configuration.

    Every field is optional: unset fields fall back to built-in defaults when
    the effective configuration for a branch is resolved.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    tag_prefix: Optional[str] = Field(None, alias="tag-prefix")
    next_version: Optional[str] = Field(None, alias="next-version")
    increment: Optional[IncrementStrategy] = None
    mode: Optional[VersioningMode] = None
    tag: Optional[str] = None
    major_version_bump_message: Optional[str] = Field(
        None, alias="major-version-bump-message"
    )
    minor_version_bump_message: Optional[str] = Field(
        None, alias="minor-version-bump-message"
    )
    patch_version_bump_message: Optional[str] = Field(
        None, alias="patch-version-bump-message"
    )
    no_bump_message: Optional[str] = Field(None, alias="no-bump-message")
    commit_message_incrementing: Optional[CommitMessageIncrementMode] = Field(
        None, alias="commit-message-incrementing"
    )
    continuous_delivery_fallback_tag: Optional[str] = Field(
        None, alias="continuous-delivery-fallback-tag"
    )
    legacy_semver_padding: Optional[int] = Field(
        None, alias="legacy-semver-padding", ge=0
    )
    build_metadata_padding: Optional[int] = Field(
        None, alias="build-metadata-padding", ge=0
    )
    commits_since_version_source_padding: Optional[int] = Field(
        None, alias="commits-since-version-source-padding", ge=0
    )
    commit_date_format: Optional[str] = Field(None, alias="commit-date-format")
    assembly_versioning_scheme: Optional[AssemblyVersioningScheme] = Field(
        None, alias="assembly-versioning-scheme"
    )
    assembly_file_versioning_scheme: Optional[AssemblyVersioningScheme] = Field(
        None, alias="assembly-file-versioning-scheme"
    )
    no_cache: Optional[bool] = Field(None, alias="no-cache")
    no_normalize: Optional[bool] = Field(None, alias="no-normalize")
    branches: Dict[str, BranchConfig] = Field(default_factory=dict)

    @field_validator("next_version", mode="before")
    @classmethod
    def validate_next_version(cls, v: Any) -> Optional[str]:
        if v is None:
            return v
        # Decimal scalars arrive as text; a bare integer 5 means 5.0
        if isinstance(v, int) and not isinstance(v, bool):
            v = f"{v}.0"
        text = str(v).strip()
        SemanticVersion.parse(text)
        return text

    @field_validator(
        "major_version_bump_message",
        "minor_version_bump_message",
        "patch_version_bump_message",
        "no_bump_message",
        "tag_prefix",
    )
    @classmethod
    def validate_patterns(cls, v: Optional[str]) -> Optional[str]:
        return _validate_regex(v)

    @field_validator("increment", mode="before")
    @classmethod
    def validate_increment(cls, v: Any) -> Any:
        return _match_enum(IncrementStrategy, v)

    @field_validator("mode", mode="before")
    @classmethod
    def validate_mode(cls, v: Any) -> Any:
        return _match_enum(VersioningMode, v)

    @field_validator("commit_message_incrementing", mode="before")
    @classmethod
    def validate_commit_message_incrementing(cls, v: Any) -> Any:
        return _match_enum(CommitMessageIncrementMode, v)

    @field_validator(
        "assembly_versioning_scheme", "assembly_file_versioning_scheme", mode="before"
    )
    @classmethod
    def validate_assembly_scheme(cls, v: Any) -> Any:
        return _match_enum(AssemblyVersioningScheme, v)

    @field_validator("branches", mode="before")
    @classmethod
    def validate_branches(cls, v: Any) -> Any:
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("branches must be a mapping of rule name to settings")
        # "feature:" with no settings is an empty override
        return {name: (rule or {}) for name, rule in v.items()}

    @classmethod
    def from_dict(
        cls, data: Optional[Dict[str, Any]], source: Optional[Path] = None
    ) -> "ConfigDocument":
        """
        Validate a parsed configuration mapping.

        Raises:
            ConfigError: If a field is unknown or holds an invalid value
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("top level must be a mapping", source)
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigError(problems, source) from e

    @classmethod
    def from_yaml(cls, path_or_content: Any) -> "ConfigDocument":
        """Load a configuration document from a YAML file or string content."""
        source = None
        try:
            if isinstance(path_or_content, Path):
                source = path_or_content
                with open(path_or_content, "r") as f:
                    data = yaml.load(f, Loader=_ConfigLoader)
            else:
                data = yaml.load(str(path_or_content), Loader=_ConfigLoader)
        except yaml.YAMLError as e:
            raise ConfigError(f"cannot parse YAML: {e}", source) from e
        except OSError as e:
            raise ConfigError(f"cannot read file: {e}", source) from e

        return cls.from_dict(data, source)

    def canonical_json(self) -> str:
        """Stable serialization of the explicitly set fields, used for hashing."""
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return json.dumps(data, sort_keys=True, separators=(",", ":"))
