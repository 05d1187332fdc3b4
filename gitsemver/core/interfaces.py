"""Protocol interfaces for repository inspection.

Protocols that decouple version calculation from the git access library.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol


@dataclass(frozen=True)
class Commit:
    """A commit as seen by the version engine."""

    sha: str
    message: str
    date: datetime
    parent_count: int = 1

    @property
    def is_merge(self) -> bool:
        return self.parent_count > 1


@dataclass(frozen=True)
class Tag:
    """A tag name and the sha of the commit it points to."""

    name: str
    target: str


class RepositoryView(Protocol):
    """Minimal read-only interface over a git repository."""

    def current_branch(self) -> str:
        """Normalized name of the branch being versioned."""
        ...

    def current_commit(self) -> Commit:
        """The commit being versioned."""
        ...

    def is_dirty(self) -> bool:
        """Whether the working tree has uncommitted changes."""
        ...

    def tags(self) -> List[Tag]:
        """All tags pointing at commits."""
        ...

    def commits_between(self, start: Optional[str], end: str) -> List[Commit]:
        """Commits reachable from end but not from start, newest first."""
        ...

    def first_commit(self) -> Optional[Commit]:
        """The oldest root commit reachable from the current commit."""
        ...

    def get_commit(self, sha: str) -> Commit:
        """Look up a commit by sha."""
        ...

    def remote_url(self) -> Optional[str]:
        """URL of the origin remote, if any."""
        ...
