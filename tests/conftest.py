import io
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest
from git import Actor, Repo


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("gitsemver")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream  # Yield the stream to the test function

    # Cleanup after the test
    logger.removeHandler(handler)
    log_stream.close()


# git fixtures

AUTHOR = Actor("Test User", "test@example.com")
BASE_DATE = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class RepoBuilder:
    """Builds small git histories with one minute between commits."""

    def __init__(self, path: Path, branch: str = "main"):
        self.path = path
        self.path.mkdir(parents=True, exist_ok=True)
        self.repo = Repo.init(path, initial_branch=branch)
        with self.repo.config_writer() as cw:
            cw.set_value("user", "name", AUTHOR.name)
            cw.set_value("user", "email", AUTHOR.email)
        self._counter = 0

    def _next_date(self) -> str:
        self._counter += 1
        date = BASE_DATE + timedelta(minutes=self._counter)
        # git's internal "<epoch> <offset>" format
        return f"{int(date.timestamp())} +0000"

    def commit(self, message: str = "change", filename: Optional[str] = None) -> str:
        date = self._next_date()
        name = filename or f"file{self._counter}.txt"
        (self.path / name).write_text(f"{self._counter}\n")
        self.repo.index.add([name])
        commit = self.repo.index.commit(
            message,
            author=AUTHOR,
            committer=AUTHOR,
            author_date=date,
            commit_date=date,
        )
        return commit.hexsha

    def commits(self, count: int, message: str = "change") -> str:
        sha = None
        for i in range(count):
            sha = self.commit(f"{message} {i + 1}")
        return sha

    def tag(self, name: str, ref: str = "HEAD", message: Optional[str] = None):
        return self.repo.create_tag(name, ref=ref, message=message)

    def branch(self, name: str):
        """Create a branch at HEAD and check it out."""
        head = self.repo.create_head(name)
        head.checkout()
        return head

    def checkout(self, name: str):
        self.repo.heads[name].checkout()

    def merge(self, branch: str, message: Optional[str] = None) -> str:
        """Record a merge commit of `branch` into the current branch."""
        date = self._next_date()
        other = self.repo.heads[branch].commit
        commit = self.repo.index.commit(
            message or f"Merge branch '{branch}'",
            parent_commits=[self.repo.head.commit, other],
            author=AUTHOR,
            committer=AUTHOR,
            author_date=date,
            commit_date=date,
        )
        return commit.hexsha

    def add_remote(self, url: str, name: str = "origin"):
        return self.repo.create_remote(name, url)


@pytest.fixture
def repo_builder(tmp_path):
    """A fresh repository on `main` without commits."""
    return RepoBuilder(tmp_path / "repo")


@pytest.fixture
def single_commit_repo(repo_builder):
    """A repository with one commit, no tags and no configuration file."""
    repo_builder.commit("Initial commit")
    return repo_builder
