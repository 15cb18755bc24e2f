"""Copy-on-write aware file copying service"""

import os
import shlex
import shutil
import subprocess
import sys
import threading
from typing import List, Optional, Sequence

from git_worktree_manager.exceptions import CopyError
from git_worktree_manager.logging_config import get_logger

logger = get_logger(__name__)

# Same copy as ShutilCopyStrategy.copy, for running in a child interpreter
SHUTIL_COPY_SCRIPT = (
    "import os, shutil, sys; src, dst = sys.argv[1:3]; "
    "shutil.copytree(src, dst, symlinks=True) if os.path.isdir(src) else shutil.copy2(src, dst)"
)


class CommandCopyStrategy:
    """Copy by running `cp` with a fixed set of flags."""

    def __init__(self, name: str, args: Sequence[str], executable: str = "cp"):
        self.name = name
        self.args = list(args)
        self.executable = executable

    def command(self, src: str, dst: str) -> List[str]:
        return [self.executable, *self.args, src, dst]

    def copy(self, src: str, dst: str) -> None:
        """Run the copy; raises CalledProcessError or OSError on failure."""
        subprocess.run(self.command(src, dst), capture_output=True, check=True)

    def __repr__(self) -> str:
        return f"CommandCopyStrategy({self.name!r}, {self.args!r})"


class ShutilCopyStrategy:
    """In-process recursive copy, for hosts without a `cp` binary."""

    name = "python"

    def command(self, src: str, dst: str) -> List[str]:
        return [sys.executable, "-c", SHUTIL_COPY_SCRIPT, src, dst]

    def copy(self, src: str, dst: str) -> None:
        if os.path.isdir(src):
            shutil.copytree(src, dst, symlinks=True)
        else:
            shutil.copy2(src, dst)

    def __repr__(self) -> str:
        return "ShutilCopyStrategy()"


def select_copy_strategies(platform: Optional[str] = None) -> list:
    """Pick the ordered copy strategies for this host.

    Order: native copy-on-write, portable copy-on-write, plain recursive copy.
    macOS/BSD `cp` only knows `-c` (clonefile); GNU `cp` spells it `--reflink`.

    Args:
        platform: Platform string, defaults to sys.platform

    Returns:
        List of strategies to try in order
    """
    platform = platform or sys.platform

    if shutil.which("cp") is None:
        logger.debug("cp not found, using in-process copy")
        return [ShutilCopyStrategy()]

    if platform == "darwin" or "bsd" in platform:
        strategies = [
            CommandCopyStrategy("clonefile", ["-Rc"]),
        ]
    else:
        strategies = [
            CommandCopyStrategy("reflink", ["-R", "--reflink=always"]),
            CommandCopyStrategy("reflink-auto", ["-R", "--reflink=auto"]),
        ]
    strategies.append(CommandCopyStrategy("plain", ["-R"]))

    logger.debug(f"Copy strategies for {platform}: {[s.name for s in strategies]}")
    return strategies


class FileCopier:
    """Copies files and directories, falling back across strategies."""

    def __init__(self, strategies: Optional[list] = None):
        """Initialize the copier.

        Args:
            strategies: Ordered strategies to try, defaults to select_copy_strategies()
        """
        self.strategies = strategies if strategies is not None else select_copy_strategies()

    def copy(self, src: str, dst: str) -> None:
        """Copy src (file or directory) to dst.

        Raises:
            CopyError: If every strategy failed
        """
        src = os.fspath(src)
        dst = os.fspath(dst)

        parent = os.path.dirname(dst)
        if parent:
            os.makedirs(parent, exist_ok=True)

        existed = os.path.lexists(dst)
        for strategy in self.strategies:
            try:
                strategy.copy(src, dst)
            except (subprocess.CalledProcessError, OSError) as e:
                stderr = getattr(e, "stderr", None)
                detail = stderr.decode(errors="replace").strip() if stderr else str(e)
                logger.debug(f"Copy strategy {strategy.name} failed for {src}: {detail}")
                if not existed:
                    _discard_partial(dst)
                continue

            logger.debug(f"Copied {src} to {dst} using {strategy.name}")
            return

        raise CopyError(src, dst)

    def background_command(self, src: str, dst: str) -> List[str]:
        """Command line that runs the whole strategy chain in one child process.

        Each failed attempt removes a destination it created before the next
        one runs, and a chain that fails entirely leaves no destination behind.
        """
        shell = shutil.which("sh")
        if shell is None:
            logger.debug("sh not found, background copy runs only the last strategy")
            return self.strategies[-1].command(src, dst)

        existed = os.path.lexists(dst)
        attempts = [shlex.join(strategy.command(src, dst)) for strategy in self.strategies]
        discard = "" if existed else f"rm -rf {shlex.quote(dst)}; "
        script = " || ".join([attempts[0]] + [f"{{ {discard}{attempt}; }}" for attempt in attempts[1:]])
        if not existed:
            script += f" || {{ {discard}exit 1; }}"
        return [shell, "-c", script]

    def copy_in_background(self, src: str, dst: str) -> "BackgroundCopy":
        """Start copying src to dst in a detached child process and return immediately.

        The child runs in its own session and outlives this interpreter, so the
        caller may finish and exit before the copy completes.

        Raises:
            CopyError: If the child process cannot be started
        """
        src = os.fspath(src)
        dst = os.fspath(dst)

        parent = os.path.dirname(dst)
        if parent:
            os.makedirs(parent, exist_ok=True)

        command = self.background_command(src, dst)
        logger.debug(f"Background copy: {command}")
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            logger.debug(f"Could not start background copy: {e}")
            raise CopyError(src, dst) from e

        return BackgroundCopy(src, dst, process)


class BackgroundCopy:
    """A copy running in a detached child process."""

    def __init__(self, src: str, dst: str, process: subprocess.Popen):
        self.src = src
        self.dst = dst
        self.process = process
        # Reports failures while this interpreter is still alive; never joined by callers
        self._watcher = threading.Thread(
            target=self._watch,
            name=f"copy-{os.path.basename(src)}",
            daemon=True,
        )
        self._watcher.start()

    def _watch(self) -> None:
        returncode = self.process.wait()
        if returncode != 0:
            logger.warning(f"Failed to copy {os.path.basename(self.src)}: exit code {returncode}")

    def wait(self, timeout: Optional[float] = None) -> int:
        """Block until the child exits; returns its exit code."""
        self.process.wait(timeout=timeout)
        self._watcher.join(timeout)
        return self.process.returncode


def _discard_partial(path: str) -> None:
    """Remove whatever a failed copy attempt left at path."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path, ignore_errors=True)
    elif os.path.lexists(path):
        try:
            os.unlink(path)
        except OSError as e:
            logger.debug(f"Could not remove partial copy {path}: {e}")
