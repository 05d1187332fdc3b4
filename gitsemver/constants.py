from enum import Enum


class IncrementStrategy(str, Enum):
    """Which part of the version a branch bumps by default."""

    MAJOR = "Major"
    MINOR = "Minor"
    PATCH = "Patch"
    NONE = "None"
    INHERIT = "Inherit"

    @property
    def weight(self) -> int:
        return _INCREMENT_WEIGHTS[self]


_INCREMENT_WEIGHTS = {
    IncrementStrategy.INHERIT: -1,
    IncrementStrategy.NONE: 0,
    IncrementStrategy.PATCH: 1,
    IncrementStrategy.MINOR: 2,
    IncrementStrategy.MAJOR: 3,
}


class VersioningMode(str, Enum):
    ContinuousDelivery = "ContinuousDelivery"
    ContinuousDeployment = "ContinuousDeployment"


class CommitMessageIncrementMode(str, Enum):
    Enabled = "Enabled"
    Disabled = "Disabled"


class AssemblyVersioningScheme(str, Enum):
    MajorMinorPatchTag = "MajorMinorPatchTag"
    MajorMinorPatch = "MajorMinorPatch"
    MajorMinor = "MajorMinor"
    Major = "Major"
    NoScheme = "None"


class VersionSourceKind(Enum):
    TAG = "Tag"
    NEXT_VERSION_OVERRIDE = "NextVersionOverride"
    MERGE_MESSAGE = "MergeMessage"
    CONFIG_DEFAULT = "ConfigDefault"


# Tie-break order when two candidates carry the same base version
SOURCE_KIND_PRIORITY = {
    VersionSourceKind.TAG: 3,
    VersionSourceKind.MERGE_MESSAGE: 2,
    VersionSourceKind.CONFIG_DEFAULT: 1,
    VersionSourceKind.NEXT_VERSION_OVERRIDE: 0,
}

CONFIG_FILE_NAME = "gitsemver.yml"
CACHE_DIR_NAME = "gitsemver_cache"
CACHE_FILE_SUFFIX = ".yml"

DEFAULT_TAG_PREFIX = "[vV]"
DEFAULT_BASE_VERSION = "0.1.0"
SHORT_SHA_LENGTH = 7
