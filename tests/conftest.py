"""Pytest configuration and fixtures for publisher tests."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from publisher.constants import CACHE_DIR_ENV
from tests.helpers.git_helpers import commit_all, run_git


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Drop handlers installed by setup_logging so streams closed by a test are not reused."""
    yield
    root_logger = logging.getLogger("publisher")
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers = []
    root_logger.propagate = True
    root_logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def git_identity(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate git from the user's global and system configuration.

    The global config used by every test carries a committer identity.

    Returns:
        Path to the global config file
    """
    config_file = tmp_path_factory.mktemp("gitconfig") / "config"
    config_file.write_text(
        "[user]\n"
        "\tname = Publisher Test\n"
        "\temail = publisher@test.com\n"
        "[commit]\n"
        "\tgpgsign = false\n"
    )
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(config_file))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    return config_file


@pytest.fixture
def no_git_identity(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point git at an empty global configuration."""
    empty = tmp_path / "empty-gitconfig"
    empty.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(empty))


@pytest.fixture
def tmp_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository with one commit on ``main``.

    Yields:
        Path to the temporary repository
    """
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git("init", "-q", "-b", "main", cwd=repo)
    (repo / "README.md").write_text("# Test Repo")
    commit_all(repo, "Initial commit")
    yield repo


@pytest.fixture
def remote_repo(tmp_path: Path) -> Path:
    """Create a bare repository standing in for ``acme/site`` on GitHub.

    Its ``gh-pages`` branch holds ``old.html`` and ``README.md`` from a
    previous deploy; ``main`` holds the site's sources.

    Returns:
        Path to the bare repository
    """
    remote = tmp_path / "remote" / "site.git"
    remote.parent.mkdir()
    run_git("init", "-q", "--bare", "-b", "gh-pages", str(remote))

    seed = tmp_path / "seed"
    seed.mkdir()
    run_git("init", "-q", "-b", "main", cwd=seed)
    (seed / "src.txt").write_text("sources")
    commit_all(seed, "Sources")
    run_git("checkout", "-q", "--orphan", "gh-pages", cwd=seed)
    run_git("rm", "-q", "-rf", ".", cwd=seed)
    (seed / "old.html").write_text("<p>old</p>")
    (seed / "README.md").write_text("previous deploy")
    commit_all(seed, "Previous deploy")
    run_git("push", "-q", str(remote), "main", "gh-pages", cwd=seed)
    return remote


@pytest.fixture
def seed_clone(tmp_path: Path, remote_repo: Path) -> Path:
    """A second clone of ``gh-pages`` used to push competing commits."""
    other = tmp_path / "other"
    run_git("clone", "-q", "--branch", "gh-pages", str(remote_repo), str(other))
    return other


@pytest.fixture
def cache_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the clone cache into the test's temporary directory."""
    cache = tmp_path / "cache"
    monkeypatch.setenv(CACHE_DIR_ENV, str(cache))
    return cache
