"""
Effective configuration resolution.

The effective configuration for a branch is a fold over three layers: the
built-in defaults, the global fields of the configuration document, and every
branch rule whose pattern matches the branch name, applied in declared order.
A layer only overrides the fields it explicitly sets.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from gitsemver.constants import (
    CONFIG_FILE_NAME,
    DEFAULT_TAG_PREFIX,
    AssemblyVersioningScheme,
    CommitMessageIncrementMode,
    IncrementStrategy,
    VersioningMode,
)
from gitsemver.git.repository import normalize_branch_name
from gitsemver.model.config import BranchConfig, ConfigDocument
from gitsemver.versioning.exceptions import ConfigError

logger = logging.getLogger(__name__)

BRANCH_NAME_PLACEHOLDER = "{BranchName}"

DEFAULT_SETTINGS: Mapping[str, object] = MappingProxyType(
    {
        "tag_prefix": DEFAULT_TAG_PREFIX,
        "next_version": None,
        "increment": IncrementStrategy.PATCH,
        "mode": VersioningMode.ContinuousDelivery,
        "tag": BRANCH_NAME_PLACEHOLDER,
        "major_version_bump_message": r"\+semver:\s?(breaking|major)",
        "minor_version_bump_message": r"\+semver:\s?(feature|minor)",
        "patch_version_bump_message": r"\+semver:\s?(fix|patch)",
        "no_bump_message": r"\+semver:\s?(none|skip)",
        "commit_message_incrementing": CommitMessageIncrementMode.Enabled,
        "continuous_delivery_fallback_tag": "ci",
        "prevent_increment_of_merged_branch_version": False,
        "pre_release_weight": 0,
        "legacy_semver_padding": 4,
        "build_metadata_padding": 4,
        "commits_since_version_source_padding": 4,
        "commit_date_format": "%Y-%m-%d",
        "assembly_versioning_scheme": AssemblyVersioningScheme.MajorMinorPatch,
        "assembly_file_versioning_scheme": AssemblyVersioningScheme.MajorMinorPatch,
        "no_cache": False,
        "no_normalize": False,
    }
)

DEFAULT_BRANCHES: Mapping[str, BranchConfig] = MappingProxyType(
    {
        "main": BranchConfig(
            regex=r"^master$|^main$",
            tag="",
            increment=IncrementStrategy.PATCH,
            prevent_increment_of_merged_branch_version=True,
            pre_release_weight=55000,
        ),
        "develop": BranchConfig(
            regex=r"^dev(elop)?(ment)?$",
            tag="alpha",
            increment=IncrementStrategy.MINOR,
            mode=VersioningMode.ContinuousDeployment,
            pre_release_weight=0,
        ),
        "release": BranchConfig(
            regex=r"^releases?[/-]",
            tag="beta",
            increment=IncrementStrategy.NONE,
            prevent_increment_of_merged_branch_version=True,
            pre_release_weight=30000,
        ),
        "feature": BranchConfig(
            regex=r"^features?[/-]",
            tag=BRANCH_NAME_PLACEHOLDER,
            increment=IncrementStrategy.INHERIT,
            pre_release_weight=30000,
        ),
        "pull-request": BranchConfig(
            regex=r"^(pull|pull\-requests|pr)[/-]",
            tag="PullRequest",
            increment=IncrementStrategy.INHERIT,
            pre_release_weight=30000,
        ),
        "hotfix": BranchConfig(
            regex=r"^hotfix(es)?[/-]",
            tag="beta",
            increment=IncrementStrategy.PATCH,
            pre_release_weight=30000,
        ),
        "support": BranchConfig(
            regex=r"^support[/-]",
            tag="",
            increment=IncrementStrategy.PATCH,
            prevent_increment_of_merged_branch_version=True,
            pre_release_weight=55000,
        ),
    }
)


@dataclass(frozen=True)
class EffectiveConfig:
    """Fully resolved settings used for one version computation."""

    branch_name: str
    rule_name: Optional[str]
    pre_release_label: str
    tag_prefix: str
    next_version: Optional[str]
    increment: IncrementStrategy
    mode: VersioningMode
    tag: str
    major_version_bump_message: str
    minor_version_bump_message: str
    patch_version_bump_message: str
    no_bump_message: str
    commit_message_incrementing: CommitMessageIncrementMode
    continuous_delivery_fallback_tag: str
    prevent_increment_of_merged_branch_version: bool
    pre_release_weight: int
    legacy_semver_padding: int
    build_metadata_padding: int
    commits_since_version_source_padding: int
    commit_date_format: str
    assembly_versioning_scheme: AssemblyVersioningScheme
    assembly_file_versioning_scheme: AssemblyVersioningScheme
    no_cache: bool
    no_normalize: bool

    @property
    def is_pre_release_branch(self) -> bool:
        return bool(self.pre_release_label)


def escape_branch_name(name: str) -> str:
    """Replace every character that is not alphanumeric or a dash with a dash."""
    return re.sub(r"[^a-zA-Z0-9-]", "-", name)


def merge_branch_rules(
    overrides: Mapping[str, BranchConfig],
) -> Dict[str, BranchConfig]:
    """
    Combine built-in branch rules with the document's rules.

    A document rule named like a built-in one overlays it field by field; new
    names are appended after the built-in rules in document order.
    """
    rules = dict(DEFAULT_BRANCHES)
    for name, override in overrides.items():
        update = override.model_dump(exclude_none=True)
        if name in rules:
            rules[name] = rules[name].model_copy(update=update)
        else:
            rules[name] = override
    return rules


def _overlay(settings: Dict[str, object], layer: Mapping[str, object]) -> None:
    for field, value in layer.items():
        if field in settings and value is not None:
            settings[field] = value


def _expand_label(template: str, branch_name: str, rule_regex: Optional[str]) -> str:
    if BRANCH_NAME_PLACEHOLDER not in template:
        return template
    name = branch_name
    if rule_regex:
        name = re.sub(rule_regex, "", branch_name, count=1, flags=re.IGNORECASE)
    return template.replace(BRANCH_NAME_PLACEHOLDER, escape_branch_name(name))


def resolve_effective_config(
    document: Optional[ConfigDocument], branch_name: str
) -> EffectiveConfig:
    """
    Resolve the effective configuration for a branch.

    Args:
        document: Parsed configuration document, None for all defaults
        branch_name: Branch being versioned (ref prefixes are stripped)

    Returns:
        Immutable EffectiveConfig
    """
    document = document or ConfigDocument()
    branch = normalize_branch_name(branch_name)

    settings: Dict[str, object] = dict(DEFAULT_SETTINGS)
    global_layer = document.model_dump(exclude={"branches"}, exclude_none=True)
    _overlay(settings, global_layer)
    global_increment = settings["increment"]

    rule_name = None
    rule_regex = None
    for name, rule in merge_branch_rules(document.branches).items():
        if not rule.regex or not re.search(rule.regex, branch, re.IGNORECASE):
            continue
        logger.debug(f"Branch '{branch}' matches branch rule '{name}'")
        _overlay(settings, rule.model_dump(exclude_none=True))
        rule_name, rule_regex = name, rule.regex

    if settings["increment"] == IncrementStrategy.INHERIT:
        if global_increment == IncrementStrategy.INHERIT:
            global_increment = IncrementStrategy.PATCH
        settings["increment"] = global_increment

    label = _expand_label(str(settings["tag"]), branch, rule_regex)
    if rule_name is None:
        logger.debug(f"No branch rule matches '{branch}', using global settings")

    return EffectiveConfig(
        branch_name=branch,
        rule_name=rule_name,
        pre_release_label=label,
        **settings,
    )


def apply_override(
    document: ConfigDocument, override: Union[ConfigDocument, Mapping[str, Any]]
) -> ConfigDocument:
    """
    Overlay a caller-supplied configuration on the document.

    Global fields the override sets replace the document's; branch rules of
    the same name are merged field by field.
    """
    if not isinstance(override, ConfigDocument):
        override = ConfigDocument.from_dict(dict(override))

    data = document.model_dump(by_alias=True, exclude_none=True)
    extra = override.model_dump(by_alias=True, exclude_none=True)
    branches = data.pop("branches", {})
    for name, rule in extra.pop("branches", {}).items():
        branches[name] = {**branches.get(name, {}), **rule}
    data.update(extra)
    data["branches"] = branches
    return ConfigDocument.from_dict(data)


def load_configuration(
    project_root: Optional[Path], config_file: Optional[Path] = None
) -> Tuple[ConfigDocument, Optional[Path]]:
    """
    Locate and parse the configuration document.

    Args:
        project_root: Directory searched for gitsemver.yml (None to skip)
        config_file: Explicit configuration path; must exist when given

    Returns:
        Tuple of (document, path of the file it was read from or None)

    Raises:
        ConfigError: If the file is missing (explicit path only), unreadable or invalid
    """
    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.is_file():
            raise ConfigError("configuration file does not exist", config_file)
        logger.info(f"Using configuration file {config_file}")
        return ConfigDocument.from_yaml(config_file), config_file

    if project_root is not None:
        candidate = Path(project_root) / CONFIG_FILE_NAME
        if candidate.is_file():
            logger.info(f"Using configuration file {candidate}")
            return ConfigDocument.from_yaml(candidate), candidate

    logger.info(
        f"{CONFIG_FILE_NAME} not found in {project_root}, using default configuration"
    )
    return ConfigDocument(), None
