"""
Semantic version value type.

This module provides the immutable version representation used throughout the
engine: parsing from tags and configuration values, total ordering, increments
and the string renderings that end up in the produced version variables.
"""

import re
from dataclasses import dataclass, replace
from typing import Optional, Union

from gitsemver.constants import IncrementStrategy

_CORE_PATTERN = (
    r"(?P<major>\d+)\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<tag>[0-9A-Za-z.\-]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z.\-]+))?"
)
_CORE_RE = re.compile(f"^{_CORE_PATTERN}$")
_PRE_RELEASE_RE = re.compile(r"^(?P<name>.*?)\.?(?P<number>\d+)?$")


@dataclass(frozen=True)
class SemanticVersion:
    """
    A semantic version: major.minor.patch[-label.number][+build].

    Ordering follows semantic-version precedence: the numeric triple first,
    then a version without a pre-release label ranks above one with a label,
    then labels compare lexically and pre-release numbers numerically. Build
    metadata never takes part in ordering.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    pre_release_label: Optional[str] = None
    pre_release_number: Optional[int] = None
    build_metadata: Optional[str] = None

    @classmethod
    def parse(
        cls, version_string: Union[str, int, float], tag_prefix: Optional[str] = None
    ) -> "SemanticVersion":
        """
        Parse a version string, optionally preceded by a tag prefix.

        Args:
            version_string: Version in format "x.y", "x.y.z", "x.y.z-label.n" or
                any of those with "+build" metadata
            tag_prefix: Regular expression the string must start with (e.g. "[vV]")

        Returns:
            Parsed SemanticVersion

        Raises:
            ValueError: If the string is not a version
        """
        # YAML turns "next-version: 5.0" into a float
        if isinstance(version_string, (int, float)):
            version_string = str(version_string)

        text = str(version_string).strip()
        pattern = _CORE_RE
        if tag_prefix:
            pattern = re.compile(f"^(?:{tag_prefix}){_CORE_PATTERN}$")

        match = pattern.match(text)
        if not match:
            raise ValueError(
                f"Invalid version format: '{text}'. Expected x.y, x.y.z or x.y.z-tag"
            )

        label, number = None, None
        if match.group("tag"):
            label, number = _split_pre_release(match.group("tag"))

        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch") or 0),
            pre_release_label=label,
            pre_release_number=number,
            build_metadata=match.group("build"),
        )

    @classmethod
    def try_parse(
        cls, version_string: str, tag_prefix: Optional[str] = None
    ) -> Optional["SemanticVersion"]:
        """Parse a version string, returning None instead of raising."""
        try:
            return cls.parse(version_string, tag_prefix)
        except ValueError:
            return None

    @property
    def has_pre_release(self) -> bool:
        return bool(self.pre_release_label) or self.pre_release_number is not None

    @property
    def major_minor_patch(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def pre_release_tag(self) -> str:
        """The pre-release part as it appears after the dash, e.g. "beta.4"."""
        if self.pre_release_label and self.pre_release_number is not None:
            return f"{self.pre_release_label}.{self.pre_release_number}"
        if self.pre_release_label:
            return self.pre_release_label
        if self.pre_release_number is not None:
            return str(self.pre_release_number)
        return ""

    def legacy_pre_release_tag(self, padding: int = 0) -> str:
        """The pre-release part without separator, number zero-padded."""
        label = self.pre_release_label or ""
        if self.pre_release_number is None:
            return label
        return f"{label}{str(self.pre_release_number).zfill(padding)}"

    @property
    def sem_ver(self) -> str:
        if self.has_pre_release:
            return f"{self.major_minor_patch}-{self.pre_release_tag}"
        return self.major_minor_patch

    def increment(self, strategy: IncrementStrategy) -> "SemanticVersion":
        """
        Return a new release version bumped by the given strategy.

        Pre-release label, number and build metadata are dropped.
        """
        if strategy == IncrementStrategy.MAJOR:
            return SemanticVersion(self.major + 1, 0, 0)
        if strategy == IncrementStrategy.MINOR:
            return SemanticVersion(self.major, self.minor + 1, 0)
        if strategy == IncrementStrategy.PATCH:
            return SemanticVersion(self.major, self.minor, self.patch + 1)
        if strategy == IncrementStrategy.NONE:
            return SemanticVersion(self.major, self.minor, self.patch)
        raise ValueError(f"Cannot increment a version with strategy {strategy.value}")

    def with_pre_release(
        self, label: Optional[str], number: Optional[int]
    ) -> "SemanticVersion":
        return replace(self, pre_release_label=label or None, pre_release_number=number)

    def with_build_metadata(self, build_metadata: Optional[str]) -> "SemanticVersion":
        return replace(self, build_metadata=build_metadata or None)

    @property
    def precedence(self) -> tuple:
        """Sort key implementing semantic-version precedence."""
        return (
            self.major,
            self.minor,
            self.patch,
            0 if self.has_pre_release else 1,
            self.pre_release_label or "",
            self.pre_release_number or 0,
        )

    def __str__(self) -> str:
        if self.build_metadata:
            return f"{self.sem_ver}+{self.build_metadata}"
        return self.sem_ver

    def __lt__(self, other) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.precedence < other.precedence

    def __le__(self, other) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.precedence <= other.precedence

    def __gt__(self, other) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.precedence > other.precedence

    def __ge__(self, other) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.precedence >= other.precedence


def _split_pre_release(tag: str) -> tuple:
    match = _PRE_RELEASE_RE.match(tag)
    # The pattern matches any string; both groups may be empty
    name = match.group("name") if match else tag
    number = match.group("number") if match else None
    return (name or None, int(number) if number is not None else None)

