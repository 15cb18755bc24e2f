"""Repository discovery, branch resolution and worktree creation"""

import os
from pathlib import Path
from typing import Optional, Union, TYPE_CHECKING

import git

from git_worktree_manager.exceptions import NotInGitRepoError, PullError, WorktreeCreationError
from git_worktree_manager.logging_config import get_logger
from git_worktree_manager.models.worktree import BranchRef, BranchState, WorktreeResult
from git_worktree_manager.services.git.auth import resolve_auth

if TYPE_CHECKING:
    from git_worktree_manager.config import Config

logger = get_logger(__name__)

# Lower-cased fragments of git pull errors that mean "nothing to pull from"
NO_UPSTREAM_MARKERS = (
    "no upstream",
    "no tracking information",
    "no remote repository specified",
    "not currently on a branch",
)
AUTH_FAILURE_MARKERS = (
    "authentication failed",
    "authentication required",
    "repository not found",
    "permission denied (publickey",
    "could not read username",
)


def command_error_detail(error: git.exc.GitCommandError) -> str:
    """Extract git's own message from a GitCommandError."""
    stderr = (error.stderr if hasattr(error, "stderr") else "") or ""
    stderr = stderr.strip()
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:"):].strip().strip("'").strip()
    if stderr:
        return stderr
    status = error.status if hasattr(error, "status") else "unknown"
    return f"exit code {status}"


def sanitize_branch_name(branch_name: str) -> str:
    """Directory name for a branch: every '/' becomes '_'."""
    return branch_name.replace("/", "_")


class GitRepository:
    """The repository enclosing the working directory."""

    def __init__(self, repo: git.Repo, config: "Config"):
        self.repo = repo
        self.config = config
        self.verbose = config.get("verbose", False)
        self.remote_name = config.get("remote_name", "origin")
        self.root = Path(repo.working_tree_dir)

    @classmethod
    def discover(cls, config: "Config", path: Optional[Union[str, os.PathLike]] = None) -> "GitRepository":
        """Open the repository containing path (default: the current directory).

        Raises:
            NotInGitRepoError: If path is not inside a non-bare git repository
        """
        path = os.fspath(path) if path is not None else os.getcwd()
        try:
            repo = git.Repo(path, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            logger.debug(f"No git repository at {path}: {e}")
            raise NotInGitRepoError(path) from e

        if repo.bare or repo.working_tree_dir is None:
            logger.debug(f"Repository at {repo.git_dir} has no working tree")
            raise NotInGitRepoError(path)

        logger.debug(f"Repository root: {repo.working_tree_dir}")
        return cls(repo, config)

    def worktree_path_for(self, branch_name: str) -> Path:
        """Sibling directory of the repository root for branch_name."""
        return self.root.parent / sanitize_branch_name(branch_name)

    def get_remote_url(self) -> Optional[str]:
        """First URL of the default remote, or None if it is not configured."""
        try:
            remote = self.repo.remote(self.remote_name)
            return next(iter(remote.urls), None)
        except (ValueError, git.exc.GitCommandError) as e:
            logger.debug(f"No URL for remote {self.remote_name}: {e}")
            return None

    def pull(self) -> None:
        """Pull the current branch from its upstream.

        Raises:
            PullError: If the pull fails; no_upstream is set when there is
                nothing configured to pull from
        """
        credential = resolve_auth(self.get_remote_url())
        env = credential.git_environment() if credential else {}

        try:
            with self.repo.git.custom_environment(**env):
                _, stdout, stderr = self.repo.git.pull(with_extended_output=True)
        except git.exc.GitCommandError as e:
            detail = command_error_detail(e)
            lowered = detail.lower()
            if any(marker in lowered for marker in NO_UPSTREAM_MARKERS):
                raise PullError("no upstream configured for current branch", no_upstream=True) from e
            if any(marker in lowered for marker in AUTH_FAILURE_MARKERS):
                raise PullError("authentication failed or repository not accessible") from e
            raise PullError(f"failed to pull: {detail}") from e

        for line in (stdout + "\n" + stderr).splitlines():
            if line.strip():
                logger.info(f"pull: {line}")

    def branch_exists_locally(self, branch_name: str) -> bool:
        return git.Head(self.repo, f"refs/heads/{branch_name}").is_valid()

    def branch_exists_on_remote(self, branch_name: str) -> bool:
        return git.RemoteReference(self.repo, self._remote_ref_path(branch_name)).is_valid()

    def _remote_ref_path(self, branch_name: str) -> str:
        return f"refs/remotes/{self.remote_name}/{branch_name}"

    def resolve_branch(self, branch_name: str) -> BranchRef:
        """Find branch_name locally, on the default remote, or fall back to HEAD.

        Raises:
            WorktreeCreationError: If the repository has no commit to branch from
        """
        if self.branch_exists_locally(branch_name):
            head = git.Head(self.repo, f"refs/heads/{branch_name}")
            ref = BranchRef(branch_name, head.commit.hexsha, BranchState.LOCAL)
        elif self.branch_exists_on_remote(branch_name):
            remote_ref = git.RemoteReference(self.repo, self._remote_ref_path(branch_name))
            ref = BranchRef(branch_name, remote_ref.commit.hexsha, BranchState.REMOTE)
        else:
            try:
                sha = self.repo.head.commit.hexsha
            except ValueError as e:
                raise WorktreeCreationError(branch_name, "repository has no commits yet") from e
            ref = BranchRef(branch_name, sha, BranchState.NEW)

        logger.debug(f"Resolved {branch_name} as {ref.state.value} at {ref.commit_sha[:12]}")
        return ref

    def create_worktree(self, branch: BranchRef, path: Path) -> None:
        """Run `git worktree add` for branch at path.

        A local branch is checked out as is; otherwise git creates the branch
        at the resolved commit together with the worktree.

        Raises:
            WorktreeCreationError: If git fails
        """
        if branch.needs_new_branch:
            args = ["add", "-b", branch.name, str(path), branch.commit_sha]
        else:
            args = ["add", str(path), branch.name]

        logger.debug(f"git worktree {' '.join(args)}")
        try:
            _, stdout, stderr = self.repo.git.worktree(*args, with_extended_output=True)
        except git.exc.GitCommandError as e:
            raise WorktreeCreationError(branch.name, command_error_detail(e)) from e

        for line in (stdout + "\n" + stderr).splitlines():
            if line.strip():
                logger.info(f"worktree: {line}")

    def resolve_and_create_worktree(self, branch_name: str) -> WorktreeResult:
        """Resolve branch_name and create its worktree next to the repository root."""
        path = self.worktree_path_for(branch_name)
        branch = self.resolve_branch(branch_name)
        self.create_worktree(branch, path)
        return WorktreeResult(path=path, branch=branch, repo_root=self.root)
