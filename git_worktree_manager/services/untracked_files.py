"""Discovery of untracked configuration files worth copying into a worktree"""

import os
import re
import shutil
import subprocess
from typing import Iterable, List, Optional, TYPE_CHECKING

import git

from git_worktree_manager.config import read_ignore_case, read_untracked_patterns
from git_worktree_manager.constants import DEFAULT_UNTRACKED_FILES
from git_worktree_manager.exceptions import UntrackedFilesError
from git_worktree_manager.logging_config import get_logger

if TYPE_CHECKING:
    from git_worktree_manager.config import Config

logger = get_logger(__name__)

# fd ships as `fdfind` on Debian and Ubuntu
FD_EXECUTABLES = ("fd", "fdfind")


def build_untracked_files_pattern(fragments: Iterable[str]) -> str:
    """Join pattern fragments into one regex matching a whole file name."""
    return "^({})$".format("|".join(fragments))


def get_untracked_files_pattern(repo: Optional[git.Repo], config: "Config") -> str:
    """Build the file name pattern for this repository.

    Configured fragments (Config.untracked_patterns, else every
    `worktree.untrackedfiles` value) replace the defaults entirely. A
    configuration that does not compile falls back to the defaults.
    """
    fragments = config.untracked_patterns
    if fragments is None and repo is not None:
        fragments = read_untracked_patterns(repo)

    if not fragments:
        return build_untracked_files_pattern(DEFAULT_UNTRACKED_FILES)

    pattern = build_untracked_files_pattern(fragments)
    try:
        re.compile(pattern)
    except re.error as e:
        logger.warning(f"Invalid untracked files pattern {pattern!r} ({e}), using defaults")
        return build_untracked_files_pattern(DEFAULT_UNTRACKED_FILES)

    logger.debug(f"Using configured untracked files pattern {pattern!r}")
    return pattern


def find_fd() -> Optional[str]:
    """Return the path of the fd executable, if installed."""
    for name in FD_EXECUTABLES:
        path = shutil.which(name)
        if path:
            return path
    return None


class UntrackedFileMatcher:
    """Lists files under a repository root whose names match a pattern."""

    def __init__(self, root: str, pattern: str, dependency_dir: str, ignore_case: bool = False):
        self.root = os.fspath(root)
        self.pattern = pattern
        self.dependency_dir = dependency_dir
        self.ignore_case = ignore_case
        self.excluded_dirs = {dependency_dir, ".git"}

    def find_files(self, fd_path: Optional[str] = None) -> List[str]:
        """Find matching files, relative to the root.

        Uses fd when available, otherwise walks the tree.

        Raises:
            UntrackedFilesError: If fd fails or the walk hits an error
        """
        if fd_path is None:
            fd_path = find_fd()
        if fd_path:
            return self.find_files_with_fd(fd_path)
        return self.find_files_with_walk()

    def fd_command(self, fd_path: str) -> List[str]:
        # Same entries as the walk backend: regular files and symlinks
        args = [fd_path, "-u", "--type", "f", "--type", "l"]
        args.append("--ignore-case" if self.ignore_case else "--case-sensitive")
        for name in sorted(self.excluded_dirs):
            args.extend(["-E", name])
        args.append(self.pattern)
        return args

    def find_files_with_fd(self, fd_path: str) -> List[str]:
        command = self.fd_command(fd_path)
        logger.debug(f"Running {' '.join(command)} in {self.root}")
        try:
            result = subprocess.run(command, cwd=self.root, capture_output=True, text=True, check=True)
        except subprocess.CalledProcessError as e:
            raise UntrackedFilesError(f"fd failed (exit {e.returncode}): {(e.stderr or '').strip()}") from e
        except OSError as e:
            raise UntrackedFilesError(f"could not run fd: {e}") from e

        return parse_fd_output(result.stdout)

    def find_files_with_walk(self) -> List[str]:
        flags = re.IGNORECASE if self.ignore_case else 0
        try:
            regex = re.compile(self.pattern, flags)
        except re.error as e:
            raise UntrackedFilesError(f"invalid pattern {self.pattern!r}: {e}") from e

        def _raise(error: OSError):
            raise error

        files = []
        try:
            for dirpath, dirnames, filenames in os.walk(self.root, onerror=_raise):
                # Prune in place so os.walk never descends into excluded dirs
                dirnames[:] = [d for d in dirnames if d not in self.excluded_dirs]
                for filename in filenames:
                    if regex.match(filename):
                        full_path = os.path.join(dirpath, filename)
                        files.append(os.path.relpath(full_path, self.root))
        except OSError as e:
            raise UntrackedFilesError(f"failed to walk {self.root}: {e}") from e

        return sorted(files)


def parse_fd_output(output: str) -> List[str]:
    """Split fd's newline-delimited output; empty output is no files."""
    files = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        if line.startswith("./"):
            line = line[2:]
        files.append(line)
    return files


def list_untracked_files(repo_root: str, config: "Config", repo: Optional[git.Repo] = None) -> List[str]:
    """List untracked configuration files to copy, relative to repo_root."""
    pattern = get_untracked_files_pattern(repo, config)

    ignore_case = config.ignore_case
    if ignore_case is None:
        ignore_case = read_ignore_case(repo) if repo is not None else False

    matcher = UntrackedFileMatcher(repo_root, pattern, config.dependency_dir, ignore_case)
    files = matcher.find_files()
    logger.info(f"Found {len(files)} untracked file(s) to copy")
    return files
