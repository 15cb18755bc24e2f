"""Credential resolution for pulling from the default remote.

Each provider returns a Credential or None and never raises; resolve_auth
tries the providers for the remote's transport in order and settles for None
(git's own defaults) when none of them finds anything.
"""

import os
import subprocess
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import urlparse

from git_worktree_manager.constants import KNOWN_HTTPS_HOSTS, SSH_KEY_NAMES, TOKEN_USERNAME
from git_worktree_manager.logging_config import get_logger
from git_worktree_manager.models.credential import Credential, CredentialKind

logger = get_logger(__name__)

SSH_USER = "git"

Provider = Callable[[str], Optional[Credential]]


def _run(args: List[str], input_text: Optional[str] = None, env: Optional[dict] = None) -> Optional[str]:
    """Run a helper command, returning stdout or None if it failed or is missing."""
    try:
        result = subprocess.run(
            args,
            input=input_text if input_text is not None else "",
            capture_output=True,
            text=True,
            check=True,
            env=env,
        )
    except (subprocess.CalledProcessError, OSError) as e:
        logger.debug(f"{args[0]} failed: {e}")
        return None
    return result.stdout


def is_ssh_url(remote_url: str) -> bool:
    return remote_url.startswith("git@") or remote_url.startswith("ssh://")


def https_host(remote_url: str) -> Optional[str]:
    """Return the host of an HTTPS remote on a known hosting provider."""
    parsed = urlparse(remote_url)
    if parsed.scheme != "https":
        return None
    host = (parsed.hostname or "").lower()
    return host if host in KNOWN_HTTPS_HOSTS else None


def ssh_agent_auth(remote_url: str) -> Optional[Credential]:
    """Use a running ssh-agent that holds at least one identity."""
    sock = os.environ.get("SSH_AUTH_SOCK")
    if not sock or not os.path.exists(sock):
        logger.debug("SSH agent not available (SSH_AUTH_SOCK unset or missing)")
        return None
    # ssh-add -l exits 1 when the agent has no identities, 2 when unreachable
    if _run(["ssh-add", "-l"]) is None:
        return None
    return Credential(kind=CredentialKind.SSH_AGENT, username=SSH_USER)


def ssh_key_file_auth(remote_url: str, home: Optional[Path] = None) -> Optional[Credential]:
    """Use the first conventional key in ~/.ssh that exists and loads without a passphrase."""
    ssh_dir = (home or Path.home()) / ".ssh"
    for key_name in SSH_KEY_NAMES:
        key_path = ssh_dir / key_name
        if not key_path.is_file():
            continue
        # Deriving the public key proves the private key parses
        if _run(["ssh-keygen", "-y", "-P", "", "-f", str(key_path)]) is None:
            logger.debug(f"SSH key {key_path} could not be loaded")
            continue
        return Credential(kind=CredentialKind.SSH_KEY, username=SSH_USER, key_path=str(key_path))
    return None


def gh_cli_auth(remote_url: str) -> Optional[Credential]:
    """Ask the GitHub CLI for its token."""
    output = _run(["gh", "auth", "token"])
    token = output.strip() if output else ""
    if not token:
        return None
    return Credential(
        kind=CredentialKind.TOKEN,
        username=TOKEN_USERNAME,
        secret=token,
        host=https_host(remote_url),
    )


def credential_helper_auth(remote_url: str) -> Optional[Credential]:
    """Ask git's configured credential helper for a stored password."""
    env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
    output = _run(["git", "credential", "fill"], input_text=f"url={remote_url}\n", env=env)
    if output is None:
        return None
    password = parse_credential_password(output)
    if not password:
        logger.debug("No password found in git credentials")
        return None
    return Credential(
        kind=CredentialKind.TOKEN,
        username=TOKEN_USERNAME,
        secret=password,
        host=https_host(remote_url),
    )


def parse_credential_password(output: str) -> Optional[str]:
    """Extract the password= field from `git credential fill` output."""
    for line in output.splitlines():
        if line.startswith("password="):
            return line[len("password="):]
    return None


def providers_for(remote_url: str) -> List[Provider]:
    """Ordered credential providers for a remote URL."""
    if is_ssh_url(remote_url):
        return [ssh_agent_auth, ssh_key_file_auth]
    if https_host(remote_url):
        return [gh_cli_auth, credential_helper_auth]
    return []


def resolve_auth(remote_url: Optional[str]) -> Optional[Credential]:
    """Find credentials for remote_url.

    Returns:
        The first credential any provider finds, or None to let git use its defaults
    """
    if not remote_url:
        return None

    providers = providers_for(remote_url)
    if not providers:
        logger.debug(f"No authentication method for {remote_url}, using git defaults")
        return None

    for provider in providers:
        credential = provider(remote_url)
        if credential is not None:
            logger.debug(f"Authenticating with {credential.kind.value} via {provider.__name__}")
            return credential

    logger.info("No credentials found, using git defaults")
    return None
