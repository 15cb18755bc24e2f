"""Tests for credential resolution"""
import base64
from unittest.mock import patch

import pytest

from git_worktree_manager.models.credential import Credential, CredentialKind
from git_worktree_manager.services.git import auth


SSH_URL = "git@github.com:test/test-repo.git"
HTTPS_URL = "https://github.com/test/test-repo.git"


class TestProviderSelection:
    """Test which provider chain a URL gets."""

    @pytest.mark.parametrize("url", [SSH_URL, "ssh://git@example.com/repo.git"])
    def test_ssh_urls(self, url):
        """Test SSH URLs try the agent, then key files."""
        assert auth.providers_for(url) == [auth.ssh_agent_auth, auth.ssh_key_file_auth]

    def test_github_https(self):
        """Test GitHub HTTPS URLs try gh, then the credential helper."""
        assert auth.providers_for(HTTPS_URL) == [auth.gh_cli_auth, auth.credential_helper_auth]

    @pytest.mark.parametrize("url", [
        "https://gitlab.example.com/test/repo.git",
        "http://github.com/test/repo.git",
        "/srv/git/repo.git",
        "file:///srv/git/repo.git",
    ])
    def test_other_urls_have_no_providers(self, url):
        """Test unknown transports get git's defaults."""
        assert auth.providers_for(url) == []
        assert auth.resolve_auth(url) is None

    def test_missing_url(self):
        """Test no remote URL means no credential."""
        assert auth.resolve_auth(None) is None


class TestResolveAuth:
    """Test the ordered fallback chain."""

    def test_first_provider_wins(self, monkeypatch):
        """Test the agent credential is used when available."""
        agent = Credential(kind=CredentialKind.SSH_AGENT, username="git")
        monkeypatch.setattr(auth, "ssh_agent_auth", lambda url: agent)
        monkeypatch.setattr(auth, "ssh_key_file_auth", lambda url: pytest.fail("should not be called"))

        assert auth.resolve_auth(SSH_URL) is agent

    def test_falls_back_to_next_provider(self, monkeypatch):
        """Test key files are tried when the agent is unavailable."""
        key = Credential(kind=CredentialKind.SSH_KEY, username="git", key_path="/home/u/.ssh/id_rsa")
        monkeypatch.setattr(auth, "ssh_agent_auth", lambda url: None)
        monkeypatch.setattr(auth, "ssh_key_file_auth", lambda url: key)

        assert auth.resolve_auth(SSH_URL) is key

    def test_all_providers_fail(self, monkeypatch):
        """Test an exhausted chain degrades to no credential."""
        monkeypatch.setattr(auth, "gh_cli_auth", lambda url: None)
        monkeypatch.setattr(auth, "credential_helper_auth", lambda url: None)

        assert auth.resolve_auth(HTTPS_URL) is None


class TestSSHProviders:
    """Test SSH agent and key file discovery."""

    def test_agent_without_socket(self, monkeypatch):
        """Test no SSH_AUTH_SOCK means no agent credential."""
        monkeypatch.delenv("SSH_AUTH_SOCK", raising=False)
        assert auth.ssh_agent_auth(SSH_URL) is None

    def test_agent_with_identities(self, monkeypatch, temp_dir):
        """Test a reachable agent with keys is used."""
        sock = temp_dir / "agent.sock"
        sock.write_text("")
        monkeypatch.setenv("SSH_AUTH_SOCK", str(sock))

        with patch.object(auth, "_run", return_value="256 SHA256:abc user@host (ED25519)\n"):
            credential = auth.ssh_agent_auth(SSH_URL)

        assert credential.kind is CredentialKind.SSH_AGENT
        assert credential.git_environment() == {}

    def test_agent_without_identities(self, monkeypatch, temp_dir):
        """Test an empty agent is skipped."""
        sock = temp_dir / "agent.sock"
        sock.write_text("")
        monkeypatch.setenv("SSH_AUTH_SOCK", str(sock))

        with patch.object(auth, "_run", return_value=None):
            assert auth.ssh_agent_auth(SSH_URL) is None

    def test_key_files_in_order(self, temp_dir):
        """Test the first key that exists and loads is chosen."""
        ssh_dir = temp_dir / ".ssh"
        ssh_dir.mkdir()
        (ssh_dir / "id_rsa").write_text("encrypted")
        (ssh_dir / "id_ed25519").write_text("plain")
        (ssh_dir / "id_ecdsa").write_text("plain")

        def fake_run(args, input_text=None, env=None):
            # id_rsa needs a passphrase, so it does not load
            return None if args[-1].endswith("id_rsa") else "ssh-ed25519 AAAA\n"

        with patch.object(auth, "_run", side_effect=fake_run):
            credential = auth.ssh_key_file_auth(SSH_URL, home=temp_dir)

        assert credential.kind is CredentialKind.SSH_KEY
        assert credential.key_path == str(ssh_dir / "id_ed25519")
        assert "id_ed25519" in credential.git_environment()["GIT_SSH_COMMAND"]

    def test_no_key_files(self, temp_dir):
        """Test an empty ~/.ssh yields nothing."""
        (temp_dir / ".ssh").mkdir()
        assert auth.ssh_key_file_auth(SSH_URL, home=temp_dir) is None


class TestHTTPSProviders:
    """Test gh and credential helper lookups."""

    def test_gh_token(self):
        """Test the gh CLI token is used."""
        with patch.object(auth, "_run", return_value="gho_secret\n") as mock_run:
            credential = auth.gh_cli_auth(HTTPS_URL)

        mock_run.assert_called_once_with(["gh", "auth", "token"])
        assert credential.kind is CredentialKind.TOKEN
        assert credential.secret == "gho_secret"
        assert credential.host == "github.com"

    def test_gh_missing(self):
        """Test a failing gh yields nothing."""
        with patch.object(auth, "_run", return_value=None):
            assert auth.gh_cli_auth(HTTPS_URL) is None

    def test_credential_helper(self):
        """Test the password= field of git credential fill is used."""
        response = "protocol=https\nhost=github.com\nusername=me\npassword=hunter2\n"
        with patch.object(auth, "_run", return_value=response) as mock_run:
            credential = auth.credential_helper_auth(HTTPS_URL)

        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "credential", "fill"]
        assert kwargs["input_text"] == f"url={HTTPS_URL}\n"
        assert kwargs["env"]["GIT_TERMINAL_PROMPT"] == "0"
        assert credential.secret == "hunter2"

    def test_credential_helper_without_password(self):
        """Test a response without password= yields nothing."""
        with patch.object(auth, "_run", return_value="protocol=https\nhost=github.com\n"):
            assert auth.credential_helper_auth(HTTPS_URL) is None

    def test_parse_credential_password(self):
        """Test password parsing keeps '=' inside the value."""
        assert auth.parse_credential_password("username=a\npassword=p=q\n") == "p=q"
        assert auth.parse_credential_password("username=a\n") is None


class TestCredential:
    """Test how credentials reach git."""

    def test_token_environment(self):
        """Test tokens become a basic auth header scoped to the host."""
        credential = Credential(kind=CredentialKind.TOKEN, username="token", secret="s3cret", host="github.com")
        env = credential.git_environment()

        expected = base64.b64encode(b"token:s3cret").decode()
        assert env["GIT_CONFIG_COUNT"] == "1"
        assert env["GIT_CONFIG_KEY_0"] == "http.https://github.com/.extraHeader"
        assert env["GIT_CONFIG_VALUE_0"] == f"Authorization: Basic {expected}"
        assert env["GIT_TERMINAL_PROMPT"] == "0"

    def test_repr_hides_secret(self):
        """Test secrets never show up in repr."""
        credential = Credential(kind=CredentialKind.TOKEN, username="token", secret="s3cret", host="github.com")
        assert "s3cret" not in repr(credential)
