"""Custom exceptions for git-worktree-manager"""

from typing import Optional


class WorktreeManagerError(Exception):
    """Base exception for all git-worktree-manager errors."""
    pass


class NotInGitRepoError(WorktreeManagerError):
    """Exception raised when the current directory is not inside a git repository."""

    def __init__(self, path: Optional[str] = None):
        self.path = path
        super().__init__("not in a git repository")


class GitOperationError(WorktreeManagerError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class WorktreeCreationError(GitOperationError):
    """Exception raised when git refuses to create the worktree."""

    def __init__(self, branch: str, message: Optional[str] = None):
        super().__init__("worktree add", branch, message)

    def __str__(self) -> str:
        if self.message:
            return f"failed to create git worktree: {self.message}"
        return "failed to create git worktree"


class PullError(GitOperationError):
    """Exception raised when pulling the current branch fails."""

    def __init__(self, message: Optional[str] = None, no_upstream: bool = False):
        self.no_upstream = no_upstream
        super().__init__("pull", message=message)


class CopyError(WorktreeManagerError):
    """Exception raised when every copy strategy failed."""

    def __init__(self, src: str, dst: str):
        self.src = src
        self.dst = dst
        super().__init__(f"failed to copy {src} to {dst}")


class UntrackedFilesError(WorktreeManagerError):
    """Exception raised when untracked file discovery fails."""
    pass


class DirectoryChangeError(WorktreeManagerError):
    """Exception raised when the process cannot change into the new worktree."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        error_msg = f"failed to change to worktree directory {path}"
        if reason:
            error_msg += f": {reason}"
        super().__init__(error_msg)
