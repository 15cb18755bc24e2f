"""Shared constants for git-worktree-manager."""

from typing import List


DEFAULT_REMOTE = "origin"

# Directory copied in the background and excluded from untracked file discovery
DEPENDENCY_DIR = "node_modules"

# Marker file that triggers `direnv allow` in the new worktree
ENVRC_FILE = ".envrc"


# git config keys (repository, global or system scope)
UNTRACKED_FILES_CONFIG_KEY = "worktree.untrackedfiles"
UNTRACKED_FILES_IGNORE_CASE_KEY = "worktree.untrackedfilesignorecase"


# Regex fragments for the files copied when nothing is configured
DEFAULT_UNTRACKED_FILES: List[str] = [
    r"\.env",
    r"\.envrc",
    r"\.env\.local",
    r"\.mise\.toml",
    r"\.tool-versions",
    r"mise\.toml",
]


# Private key file names tried, in order, inside ~/.ssh
SSH_KEY_NAMES: List[str] = ["id_rsa", "id_ed25519", "id_ecdsa", "id_dsa"]

# Hosts whose HTTPS remotes get a token from gh / the credential helper
KNOWN_HTTPS_HOSTS: List[str] = ["github.com"]

# Username sent with token credentials
TOKEN_USERNAME = "token"


# Output colors (Rich color names)
COLOR_ERROR = "red"
COLOR_WARNING = "yellow"
COLOR_SUCCESS = "green"
