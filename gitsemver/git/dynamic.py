"""
Dynamic repositories: versioning a remote URL without a local checkout.

When the caller supplies a target URL instead of a working copy, the engine
keeps one bare mirror per repository under the dynamic repository location,
laid out Go-style so the path is derived from the URL only:

    ~/.cache/gitsemver/repos/
    ├── github.com/
    │   └── user/
    │       └── repo/          # bare mirror, fetched on every prepare
    └── gitlab.com/
        └── group/
            └── project/

Usage:
    mirror = prepare_dynamic_repository(
        "https://github.com/user/repo.git", "main", timeout=60
    )
    repository = GitRepository(mirror, target_branch="main")

Normalization points the mirror's local branch at the fetched remote branch
and HEAD at that branch, so preparing the same (URL, branch) twice yields the
same repository state whatever the mirror's location on disk. Only the mirror
is written to; a user's working copy is never touched.

Thread Safety:
    A process-local lock per URL serializes clone/fetch/normalize on the same
    mirror. A clone/fetch that outlives its deadline keeps the lock until it
    finishes. Git's own lock files cover other processes.
"""

import logging
import re
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Callable, Optional, Union
from urllib.parse import urlparse

from dulwich import porcelain
from dulwich.errors import NotGitRepository

from gitsemver.config import get_dynamic_repositories_dir
from gitsemver.git.repository import normalize_branch_name
from gitsemver.versioning.exceptions import RepositoryFetchTimeout

logger = logging.getLogger(__name__)


# Each repo URL gets its own lock to prevent concurrent fetches into one mirror
_repo_locks = {}
_repo_locks_lock = threading.Lock()


def _get_repo_lock(repo_url: str) -> threading.Lock:
    with _repo_locks_lock:
        if repo_url not in _repo_locks:
            _repo_locks[repo_url] = threading.Lock()
        return _repo_locks[repo_url]


def parse_repo_url(url: str) -> str:
    """
    Parse a git repository URL into a Go-style relative path.

    Examples:
        https://github.com/user/repo.git -> github.com/user/repo
        git@github.com:user/repo.git -> github.com/user/repo
        https://gitlab.com/group/subgroup/project -> gitlab.com/group/subgroup/project
        file:///srv/git/repo.git -> srv/git/repo

    Args:
        url: Git repository URL or local path

    Returns:
        Relative path-like string (e.g., "github.com/user/repo")
    """
    url = url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[:-4]

    # Handle SSH URLs (git@host:path)
    ssh_match = re.match(r"^[\w.-]+@([^:/]+):(.+)$", url)
    if ssh_match:
        host, path = ssh_match.groups()
        return f"{host.lower()}/{path.lstrip('/')}"

    if url.startswith("file://"):
        url = url[len("file://") :]

    parsed = urlparse(url)
    if parsed.netloc and parsed.path:
        # Credentials and ports do not identify the repository
        host = parsed.hostname or parsed.netloc
        return f"{host.lower()}/{parsed.path.lstrip('/')}"

    # Fallback: local path, made relative
    return url.replace(":", "/").replace("\\", "/").lstrip("/")


def _clone_or_fetch(repo_url: str, mirror_dir: Path) -> None:
    if mirror_dir.exists():
        try:
            repo = porcelain.open_repo(str(mirror_dir))
        except NotGitRepository as e:
            logger.warning(f"Dynamic repository mirror appears corrupt: {e}. Re-cloning.")
            shutil.rmtree(mirror_dir, ignore_errors=True)
        else:
            logger.info(f"Fetching {repo_url} into {mirror_dir}")
            try:
                porcelain.fetch(repo, "origin")
            finally:
                repo.close()
            return

    logger.info(f"Cloning {repo_url} to {mirror_dir}")
    try:
        repo = porcelain.clone(source=repo_url, target=str(mirror_dir), bare=True)
        repo.close()
    except Exception:
        # Never leave a half-cloned mirror behind
        shutil.rmtree(mirror_dir, ignore_errors=True)
        raise


def _normalize_mirror(mirror_dir: Path, branch: str) -> None:
    repo = porcelain.open_repo(str(mirror_dir))
    try:
        local_ref = f"refs/heads/{branch}".encode("utf-8")
        remote_ref = f"refs/remotes/origin/{branch}".encode("utf-8")
        if remote_ref in repo.refs:
            repo.refs[local_ref] = repo.refs[remote_ref]
        if local_ref in repo.refs:
            repo.refs.set_symbolic_ref(b"HEAD", local_ref)
            logger.debug(f"Normalized {mirror_dir}: HEAD -> {branch}")
        else:
            logger.warning(f"Branch '{branch}' not found in {mirror_dir}")
    finally:
        repo.close()


def _run_with_deadline(
    action: Callable[[], None],
    repo_url: str,
    timeout: Optional[float],
    on_abandoned_exit: Optional[Callable[[], None]] = None,
) -> None:
    """
    Run a clone/fetch, giving up on it after `timeout` seconds.

    A timed-out action keeps running in its worker thread; `on_abandoned_exit`
    is called once that worker finishes.
    """
    if timeout is None:
        action()
        return

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gitsemver-fetch")
    future = executor.submit(action)
    executor.shutdown(wait=False)
    try:
        future.result(timeout=timeout)
    except FutureTimeoutError:

        def _abandoned_exit(finished):
            if finished.exception() is not None:
                logger.warning(
                    f"Abandoned fetch of {repo_url} failed: {finished.exception()}"
                )
            if on_abandoned_exit is not None:
                on_abandoned_exit()

        future.add_done_callback(_abandoned_exit)
        raise RepositoryFetchTimeout(repo_url, timeout)


def prepare_dynamic_repository(
    repo_url: str,
    target_branch: Optional[str] = None,
    location: Optional[Union[str, Path]] = None,
    timeout: Optional[float] = None,
    normalize: bool = True,
) -> Path:
    """
    Clone or update the bare mirror of a remote repository.

    Args:
        repo_url: Git repository URL (or local path of another repository)
        target_branch: Branch that will be versioned
        location: Base directory for mirrors (defaults to the configured location)
        timeout: Deadline in seconds for the clone/fetch; None waits indefinitely
        normalize: Point the mirror's local branch and HEAD at the fetched target branch

    Returns:
        Path to the mirror

    Raises:
        RepositoryFetchTimeout: If the clone/fetch exceeds the deadline
    """
    base = Path(location).expanduser() if location else get_dynamic_repositories_dir()
    mirror_dir = base / parse_repo_url(repo_url)
    mirror_dir.parent.mkdir(parents=True, exist_ok=True)

    lock = _get_repo_lock(repo_url)
    lock.acquire()
    try:
        _run_with_deadline(
            lambda: _clone_or_fetch(repo_url, mirror_dir),
            repo_url,
            timeout,
            on_abandoned_exit=lock.release,
        )
    except RepositoryFetchTimeout:
        # The mirror still belongs to the abandoned worker, which releases the lock
        raise
    except BaseException:
        lock.release()
        raise

    try:
        if normalize and target_branch:
            _normalize_mirror(mirror_dir, normalize_branch_name(target_branch))
    finally:
        lock.release()

    return mirror_dir
