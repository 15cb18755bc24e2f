"""Entry point for the worktree command"""

import os
import sys
from typing import List, Optional

from git_worktree_manager import output
from git_worktree_manager.cli.args import build_parser, parse_args
from git_worktree_manager.config import Config
from git_worktree_manager.core import WorktreeManager
from git_worktree_manager.exceptions import DirectoryChangeError, WorktreeManagerError
from git_worktree_manager.logging_config import setup_logging

HELP_ARGS = {"help", "-h", "--help"}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        build_parser().print_help()
        return 1
    if len(argv) == 1 and argv[0] in HELP_ARGS:
        build_parser().print_help()
        return 0

    parsed_args = parse_args(argv)

    try:
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)
        config = Config(verbose=parsed_args.verbose, debug=parsed_args.debug)

        manager = WorktreeManager(config)
        result = manager.create_worktree(parsed_args.branch)

        # Only this process (and its children) moves; the calling shell does not
        try:
            os.chdir(result.path)
        except OSError as e:
            raise DirectoryChangeError(str(result.path), str(e)) from e

        output.success(f"created worktree {result.path}")
        return 0
    except KeyboardInterrupt:
        output.warn("Operation cancelled by user")
        return 1
    except WorktreeManagerError as e:
        output.error(str(e))
        if parsed_args.debug:
            output.console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
