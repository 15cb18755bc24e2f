"""Git-related services for git-worktree-manager."""

from .repository import GitRepository, sanitize_branch_name
from .auth import resolve_auth

__all__ = [
    "GitRepository",
    "sanitize_branch_name",
    "resolve_auth",
]
