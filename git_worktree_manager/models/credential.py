"""Credential model handed to git subprocesses."""

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class CredentialKind(Enum):
    SSH_AGENT = "ssh-agent"
    SSH_KEY = "ssh-key"
    TOKEN = "token"


@dataclass(frozen=True)
class Credential:
    """Credentials for talking to a remote.

    git does the transport itself, so a credential is applied by extending
    the environment of the git subprocess (see `git_environment`).
    """

    kind: CredentialKind
    username: str
    secret: Optional[str] = None
    key_path: Optional[str] = None
    host: Optional[str] = None

    def git_environment(self) -> Dict[str, str]:
        """Environment variables that make git use this credential."""
        if self.kind is CredentialKind.SSH_KEY and self.key_path:
            return {"GIT_SSH_COMMAND": f"ssh -i '{self.key_path}' -o IdentitiesOnly=yes"}

        if self.kind is CredentialKind.TOKEN and self.secret and self.host:
            basic = base64.b64encode(f"{self.username}:{self.secret}".encode()).decode()
            return {
                "GIT_CONFIG_COUNT": "1",
                "GIT_CONFIG_KEY_0": f"http.https://{self.host}/.extraHeader",
                "GIT_CONFIG_VALUE_0": f"Authorization: Basic {basic}",
                "GIT_TERMINAL_PROMPT": "0",
            }

        # The agent is found through SSH_AUTH_SOCK, which git already inherits
        return {}

    def __repr__(self) -> str:
        # Never leak the secret into logs
        secret = "***" if self.secret else None
        return (
            f"Credential(kind={self.kind.value!r}, username={self.username!r}, "
            f"secret={secret!r}, key_path={self.key_path!r}, host={self.host!r})"
        )
