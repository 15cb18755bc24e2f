"""Color-highlighted status lines for the terminal."""

from rich.console import Console
from rich.markup import escape

from git_worktree_manager.constants import COLOR_ERROR, COLOR_SUCCESS, COLOR_WARNING

console = Console(highlight=False, soft_wrap=True)


def error(msg: str) -> None:
    """Print a fatal error line."""
    console.print(f"[{COLOR_ERROR}]{escape(msg)}[/{COLOR_ERROR}]")


def warn(msg: str) -> None:
    """Print a warning line; execution continues."""
    console.print(f"[{COLOR_WARNING}]{escape(msg)}[/{COLOR_WARNING}]")


def success(msg: str) -> None:
    """Print the final status line of a successful run."""
    console.print(f"[{COLOR_SUCCESS}]{escape(msg)}[/{COLOR_SUCCESS}]")
