"""direnv activation for new worktrees"""

import os
import subprocess

from git_worktree_manager.constants import ENVRC_FILE
from git_worktree_manager.logging_config import get_logger

logger = get_logger(__name__)


def setup_direnv(worktree_path: str) -> bool:
    """Run `direnv allow` if the worktree has an .envrc.

    Returns:
        True if direnv was run, False if there is no .envrc

    Raises:
        subprocess.CalledProcessError: If direnv rejects the directory
        OSError: If direnv is not installed
    """
    envrc = os.path.join(os.fspath(worktree_path), ENVRC_FILE)
    if not os.path.isfile(envrc):
        logger.debug(f"No {ENVRC_FILE} in {worktree_path}")
        return False

    subprocess.run(["direnv", "allow", os.fspath(worktree_path)], capture_output=True, check=True)
    logger.info(f"direnv allowed {worktree_path}")
    return True
