"""Branch and worktree data models."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class BranchState(Enum):
    """Where the requested branch was found."""
    LOCAL = "local"
    REMOTE = "remote"  # Only on the default remote; materialized locally
    NEW = "new"  # Nowhere; created from HEAD


@dataclass(frozen=True)
class BranchRef:
    """A branch name resolved to a commit."""

    name: str
    commit_sha: str
    state: BranchState

    @property
    def needs_new_branch(self) -> bool:
        return self.state is not BranchState.LOCAL


@dataclass(frozen=True)
class WorktreeResult:
    """Outcome of a worktree creation."""

    path: Path
    branch: BranchRef
    repo_root: Path

    def __str__(self) -> str:
        return f"{self.branch.name} @ {self.path} [{self.branch.state.value}]"
