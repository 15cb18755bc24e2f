"""Pytest fixtures for git-worktree-manager tests"""
import tempfile
from pathlib import Path

import git
import pytest

from git_worktree_manager.config import Config


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # Resolve so paths compare equal to what git reports (macOS /private/var)
        yield Path(tmpdir).resolve()


@pytest.fixture
def config():
    """Default configuration with no git config lookups for patterns."""
    return Config(verbose=False, debug=False)


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with one commit on main."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    try:
        repo.git.branch('-M', 'main')
    except git.exc.GitCommandError:
        pass

    yield repo

    repo.close()


@pytest.fixture
def git_repo_with_origin(git_repo, temp_dir):
    """Repository with a bare local 'origin' that has main and feature/remote.

    feature/remote exists only as refs/remotes/origin/feature/remote.
    """
    repo = git_repo
    repo_path = Path(repo.working_dir)

    origin_path = temp_dir / "origin.git"
    git.Repo.init(origin_path, bare=True)
    repo.create_remote("origin", str(origin_path))
    repo.git.push("origin", "main")

    repo.git.checkout("-b", "feature/remote")
    (repo_path / "remote.txt").write_text("Remote content\n")
    repo.index.add(["remote.txt"])
    repo.index.commit("Remote-only work")
    repo.git.push("origin", "feature/remote")

    repo.git.checkout("main")
    repo.git.branch("-D", "feature/remote")
    repo.git.fetch("origin")

    yield repo


@pytest.fixture
def untracked_tree(temp_dir):
    """A directory tree with config files at several depths and in node_modules."""
    root = temp_dir / "tree"
    (root / "app").mkdir(parents=True)
    (root / "node_modules" / "pkg").mkdir(parents=True)

    for name in [".env", ".envrc", "mise.toml", "README.md", ".environment"]:
        (root / name).write_text(name)
    for name in [".env.local", ".tool-versions", "foo.env.bak"]:
        (root / "app" / name).write_text(name)
    (root / "node_modules" / ".env").write_text("dependency")
    (root / "node_modules" / "pkg" / ".envrc").write_text("dependency")

    return root
