"""
Read-only repository inspection backed by GitPython.

GitRepository is the only place the engine touches git objects. It exposes
the narrow RepositoryView interface (branch, head commit, tags, commit walks)
and never mutates the repository it inspects.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from git import Repo
from git.exc import BadName, BadObject, InvalidGitRepositoryError, NoSuchPathError

from gitsemver.core.interfaces import Commit, Tag
from gitsemver.versioning.exceptions import RepositoryNotFoundError, VersioningError

logger = logging.getLogger(__name__)

DETACHED_HEAD_BRANCH = "HEAD"


def normalize_branch_name(name: str) -> str:
    """
    Strip ref namespaces from a branch name.

    Examples:
        refs/heads/main -> main
        refs/head/main -> main
        refs/remotes/origin/feature/x -> feature/x
        origin/develop -> develop
    """
    name = name.strip()
    for prefix in ("refs/heads/", "refs/head/", "refs/remotes/", "origin/"):
        if name.startswith(prefix):
            name = name[len(prefix) :]
    return name


class GitRepository:
    """
    Repository inspector over a local (possibly bare) git repository.

    Args:
        path: Any directory inside the repository; parent directories are searched
        target_branch: Branch to version instead of the checked out one
        commit_id: Commit to version instead of the branch head
    """

    def __init__(
        self,
        path: Union[str, Path],
        target_branch: Optional[str] = None,
        commit_id: Optional[str] = None,
    ):
        self.path = Path(path)
        try:
            self.repo = Repo(str(self.path), search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError):
            raise RepositoryNotFoundError(self.path)

        self.target_branch = normalize_branch_name(target_branch) if target_branch else None
        self.commit_id = commit_id
        logger.debug(f"Opened git repository at {self.repo.git_dir}")

    @property
    def git_dir(self) -> Path:
        return Path(self.repo.git_dir)

    @property
    def working_tree_dir(self) -> Optional[Path]:
        if self.repo.bare or self.repo.working_tree_dir is None:
            return None
        return Path(self.repo.working_tree_dir)

    def current_branch(self) -> str:
        if self.target_branch:
            return self.target_branch
        if self.repo.head.is_detached:
            return DETACHED_HEAD_BRANCH
        return normalize_branch_name(self.repo.active_branch.name)

    def _head_sha(self) -> str:
        if self.commit_id:
            return self._resolve([self.commit_id])

        if self.target_branch:
            return self._resolve(
                [
                    f"refs/heads/{self.target_branch}",
                    f"refs/remotes/origin/{self.target_branch}",
                    self.target_branch,
                ]
            )

        try:
            return self.repo.head.commit.hexsha
        except ValueError:
            raise VersioningError(
                f"Repository at {self.repo.git_dir} has no commits on the current branch"
            )

    def _resolve(self, candidates: List[str]) -> str:
        for candidate in candidates:
            try:
                return self.repo.commit(candidate).hexsha
            except (BadName, BadObject, ValueError):
                continue
        raise VersioningError(
            f"Could not resolve '{candidates[0]}' in repository {self.repo.git_dir}"
        )

    def current_commit(self) -> Commit:
        return _to_commit(self.repo.commit(self._head_sha()))

    def get_commit(self, sha: str) -> Commit:
        return _to_commit(self.repo.commit(sha))

    def is_dirty(self) -> bool:
        if self.working_tree_dir is None:
            return False
        return self.repo.is_dirty()

    def tags(self) -> List[Tag]:
        tags = []
        for tag_ref in self.repo.tags:
            try:
                # Peels annotated tags down to the commit
                target = tag_ref.commit.hexsha
            except ValueError:
                logger.debug(f"Skipping tag {tag_ref.name}: does not point at a commit")
                continue
            tags.append(Tag(name=tag_ref.name, target=target))
        return tags

    def commits_between(self, start: Optional[str], end: str) -> List[Commit]:
        rev = end if start is None else f"{start}..{end}"
        return [_to_commit(c) for c in self.repo.iter_commits(rev, topo_order=True)]

    def first_commit(self) -> Optional[Commit]:
        output = self.repo.git.rev_list("--max-parents=0", self._head_sha())
        roots = [self.get_commit(sha) for sha in output.split()]
        if not roots:
            return None
        return min(roots, key=lambda c: (c.date, c.sha))

    def remote_url(self) -> Optional[str]:
        try:
            return self.repo.remotes.origin.url
        except (AttributeError, IndexError):
            return None


def _to_commit(commit) -> Commit:
    message = commit.message
    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    return Commit(
        sha=commit.hexsha,
        message=message,
        date=commit.committed_datetime,
        parent_count=len(commit.parents),
    )
