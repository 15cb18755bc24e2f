"""Configuration handling for git-worktree-manager"""

from dataclasses import dataclass
from typing import List, Optional

import git

from git_worktree_manager.constants import (
    DEFAULT_REMOTE,
    DEPENDENCY_DIR,
    UNTRACKED_FILES_CONFIG_KEY,
    UNTRACKED_FILES_IGNORE_CASE_KEY,
)
from git_worktree_manager.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Config:
    """Configuration for git-worktree-manager with validation."""

    # Output
    verbose: bool = False
    debug: bool = False

    # Repository layout
    remote_name: str = DEFAULT_REMOTE
    dependency_dir: str = DEPENDENCY_DIR
    copy_dependency_dir: bool = True

    # Untracked files (None = read from git config)
    untracked_patterns: Optional[List[str]] = None
    ignore_case: Optional[bool] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_remote_name()
        self._validate_dependency_dir()
        self._validate_untracked_patterns()

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_dependency_dir(self):
        """Validate dependency_dir is a single directory name."""
        if not self.dependency_dir or not self.dependency_dir.strip():
            raise ValueError("dependency_dir cannot be empty")
        if "/" in self.dependency_dir:
            raise ValueError(f"dependency_dir must be a directory name, got '{self.dependency_dir}'")

    def _validate_untracked_patterns(self):
        """Validate untracked_patterns is a list of strings when given."""
        if self.untracked_patterns is None:
            return
        if not isinstance(self.untracked_patterns, list):
            raise ValueError("untracked_patterns must be a list")
        if not all(isinstance(p, str) for p in self.untracked_patterns):
            raise ValueError("untracked_patterns must contain only strings")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "verbose": self.verbose,
            "debug": self.debug,
            "remote_name": self.remote_name,
            "dependency_dir": self.dependency_dir,
            "copy_dependency_dir": self.copy_dependency_dir,
            "untracked_patterns": self.untracked_patterns,
            "ignore_case": self.ignore_case,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        known_fields = {
            "verbose",
            "debug",
            "remote_name",
            "dependency_dir",
            "copy_dependency_dir",
            "untracked_patterns",
            "ignore_case",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)


def read_untracked_patterns(repo: git.Repo) -> List[str]:
    """Read every `worktree.untrackedfiles` value visible to the repository.

    Returns an empty list when the key is unset or git config cannot be read.
    """
    try:
        output = repo.git.config("--get-all", UNTRACKED_FILES_CONFIG_KEY)
    except git.exc.GitCommandError as e:
        # Exit status 1 just means the key is not set
        if e.status != 1:
            logger.warning(f"Could not read {UNTRACKED_FILES_CONFIG_KEY}: {e}")
        return []

    return [line.strip() for line in output.splitlines() if line.strip()]


def read_ignore_case(repo: git.Repo) -> bool:
    """Read the `worktree.untrackedfilesignorecase` flag (default false)."""
    try:
        value = repo.git.config("--type=bool", "--get", UNTRACKED_FILES_IGNORE_CASE_KEY)
    except git.exc.GitCommandError as e:
        if e.status != 1:
            logger.warning(f"Ignoring invalid {UNTRACKED_FILES_IGNORE_CASE_KEY}: {e}")
        return False
    return value.strip() == "true"
