"""Command-line argument parsing for git-worktree-manager."""

import argparse
from typing import List, Optional

from git_worktree_manager.__version__ import __version__

USAGE = "worktree [-v] <branch name>"

DESCRIPTION = """\
create a git worktree with <branch name>. Will create a branch if one isn't
found that matches the given name, locally or on origin.

Will copy over some untracked files to the new worktree. By default, this includes
.env, .envrc, .env.local, .mise.toml, .tool-versions, and mise.toml files.
node_modules, if present, is copied in the background.
"""

EPILOG = """\
To customize the list of untracked files to copy for a particular repository:
    git config --add worktree.untrackedfiles "\\.env"
    git config --add worktree.untrackedfiles "mise\\.toml"

To set a global configuration for all repositories:
    git config --global --add worktree.untrackedfiles "\\.env"
    git config --global --add worktree.untrackedfiles "mise\\.toml"

If you have any custom configuration set, it will override the defaults
completely, so add all files you want copied. Each value is a regular
expression matched against whole file names.

To match file names case-insensitively:
    git config worktree.untrackedfilesignorecase true
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worktree",
        usage=USAGE,
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"git-worktree-manager {__version__}")
    parser.add_argument("branch", help="Branch to create the worktree for")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
