"""Data models for git-worktree-manager."""

from .credential import Credential, CredentialKind
from .worktree import BranchRef, BranchState, WorktreeResult

__all__ = ["BranchRef", "BranchState", "Credential", "CredentialKind", "WorktreeResult"]
