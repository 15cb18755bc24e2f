"""Orchestration of a worktree creation"""

import os
import subprocess
from typing import Optional, Union

from git_worktree_manager import output
from git_worktree_manager.config import Config
from git_worktree_manager.exceptions import CopyError, PullError, UntrackedFilesError
from git_worktree_manager.logging_config import get_logger
from git_worktree_manager.models.worktree import WorktreeResult
from git_worktree_manager.services.environment import setup_direnv
from git_worktree_manager.services.file_copier import BackgroundCopy, FileCopier
from git_worktree_manager.services.git import GitRepository
from git_worktree_manager.services.untracked_files import list_untracked_files

logger = get_logger(__name__)


class WorktreeManager:
    """Creates a worktree for a branch and prepares it for use."""

    def __init__(self, config: Union[Config, dict], copier: Optional[FileCopier] = None):
        """Initialize WorktreeManager.

        Args:
            config: Configuration dict or Config object
            copier: File copier to use, defaults to one with the host's strategies
        """
        if isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config
        self.verbose = self.config.verbose
        self._copier = copier
        self.repo: Optional[GitRepository] = None
        # Handle of the dependency directory copy; never waited on here
        self.background_copy: Optional[BackgroundCopy] = None

    @property
    def copier(self) -> FileCopier:
        if self._copier is None:
            self._copier = FileCopier()
        return self._copier

    def create_worktree(self, branch_name: str, cwd: Optional[str] = None) -> WorktreeResult:
        """Create and populate the worktree for branch_name.

        The process working directory is left untouched; the caller decides
        whether to move into result.path.

        Raises:
            NotInGitRepoError: If cwd is not inside a git repository
            WorktreeCreationError: If git cannot create the worktree
        """
        self.repo = GitRepository.discover(self.config, cwd)

        self._pull()

        result = self.repo.resolve_and_create_worktree(branch_name)
        logger.info(f"Created worktree {result}")

        worktree_path = os.fspath(result.path)
        self._copy_dependency_dir_async(worktree_path)
        self._copy_untracked_files(worktree_path)
        self._setup_direnv(worktree_path)

        return result

    def _pull(self) -> None:
        try:
            self.repo.pull()
        except PullError as e:
            if e.no_upstream:
                logger.info(f"Skipping pull: {e.message}")
            else:
                output.warn(f"Unable to pull: {e.message}")

    def _copy_dependency_dir_async(self, worktree_path: str) -> None:
        if not self.config.copy_dependency_dir:
            return

        src = os.path.join(self.repo.root, self.config.dependency_dir)
        if not os.path.isdir(src):
            return

        dst = os.path.join(worktree_path, self.config.dependency_dir)
        output.warn(f"copying {self.config.dependency_dir} in the background")
        try:
            self.background_copy = self.copier.copy_in_background(src, dst)
        except (CopyError, OSError) as e:
            logger.warning(f"Failed to copy {self.config.dependency_dir}: {e}")

    def _copy_untracked_files(self, worktree_path: str) -> None:
        root = os.fspath(self.repo.root)
        try:
            files = list_untracked_files(root, self.config, self.repo.repo)
        except UntrackedFilesError as e:
            output.warn(f"Error copying untracked files: {e}")
            return

        for relative_path in files:
            src = os.path.join(root, relative_path)
            dst = os.path.join(worktree_path, relative_path)
            try:
                self.copier.copy(src, dst)
            except (CopyError, OSError) as e:
                logger.debug(f"Copy failed: {e}")
                output.warn(f"Unable to copy file {relative_path} to {dst} - folder may not exist")
                continue
            logger.info(f"Copied {relative_path}")

    def _setup_direnv(self, worktree_path: str) -> None:
        try:
            setup_direnv(worktree_path)
        except subprocess.CalledProcessError as e:
            detail = e.stderr.decode(errors="replace").strip() if e.stderr else f"exit {e.returncode}"
            output.warn(f"Error setting up direnv: {detail}")
        except OSError as e:
            output.warn(f"Error setting up direnv: {e}")
