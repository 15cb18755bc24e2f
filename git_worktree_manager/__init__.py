"""
git-worktree-manager - create a ready-to-use git worktree for a branch
"""

from .__version__ import __version__
from .core import WorktreeManager
from .cli import main

__all__ = ["WorktreeManager", "main", "__version__"]
