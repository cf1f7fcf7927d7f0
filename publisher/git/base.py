"""GitRunner base class -- low-level git command execution."""

import subprocess
from dataclasses import dataclass
from pathlib import Path

from publisher.exceptions import GitError
from publisher.logging import get_logger

logger = get_logger("git.base")

# Local queries get a bounded runtime; network operations pass timeout=None.
DEFAULT_TIMEOUT = 60


@dataclass(frozen=True)
class GitIdentity:
    """Author identity read from the global git configuration."""

    name: str
    email: str


def run_git(
    *args: str,
    cwd: str | Path | None = None,
    check: bool = True,
    timeout: int | None = DEFAULT_TIMEOUT,
) -> subprocess.CompletedProcess[str]:
    """Run a git command and capture its output.

    Args:
        *args: Git command arguments
        cwd: Working directory for the command
        check: Whether to raise on non-zero exit
        timeout: Timeout in seconds, or None for no limit

    Returns:
        Completed process result

    Raises:
        GitError: If the command fails (when check=True), times out, or git is missing
    """
    cmd = ["git", *args]
    logger.debug(f"Running: {' '.join(cmd)}", extra={"command": " ".join(cmd)})

    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            errors="replace",
            check=check,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise GitError(
            f"Git command timed out after {timeout}s: {' '.join(args)}",
            command=" ".join(cmd),
            exit_code=-1,
        ) from e
    except subprocess.CalledProcessError as e:
        raise GitError(
            f"Git command failed: {e.stderr.strip() if e.stderr else str(e)}",
            command=" ".join(cmd),
            exit_code=e.returncode,
        ) from e
    except FileNotFoundError as e:
        raise GitError("git executable not found", command=" ".join(cmd)) from e


def root_dir(cwd: str | Path | None = None) -> Path:
    """Get the top-level directory of the repository enclosing *cwd*.

    Raises:
        GitError: If *cwd* is not inside a git repository
    """
    result = run_git("rev-parse", "--show-toplevel", cwd=cwd)
    return Path(result.stdout.strip())


def rev_parse(ref: str = "HEAD", cwd: str | Path | None = None) -> str:
    """Get the full commit SHA of *ref*."""
    result = run_git("rev-parse", ref, cwd=cwd)
    return result.stdout.strip()


def global_identity() -> GitIdentity:
    """Read ``user.name`` and ``user.email`` from the global git config.

    Returns:
        The configured identity

    Raises:
        GitError: If either value is unset
    """
    values = []
    for key in ("user.name", "user.email"):
        try:
            result = run_git("config", "--get", "--global", key)
        except GitError as e:
            raise GitError(
                f"failed to get git {key}; set it with 'git config --global {key}'",
                command=e.command,
                exit_code=e.exit_code,
            ) from e
        values.append(result.stdout.strip())
    return GitIdentity(name=values[0], email=values[1])


class GitRunner:
    """Low-level git command runner bound to one working tree.

    Provides the subprocess execution layer and basic read-only
    queries (current_branch, current_commit).
    """

    def __init__(self, repo_path: str | Path = ".") -> None:
        """Initialize git runner.

        Args:
            repo_path: Path to the git repository

        Raises:
            GitError: If the path is not a git repository
        """
        self.repo_path = Path(repo_path).resolve()
        self._validate_repo()

    def _validate_repo(self) -> None:
        """Validate that repo_path is a git repository."""
        git_dir = self.repo_path / ".git"
        # A worktree has a .git file rather than a directory
        if not git_dir.exists():
            raise GitError(
                f"Not a git repository: {self.repo_path}",
                details={"path": str(self.repo_path)},
            )

    def _run(
        self,
        *args: str,
        check: bool = True,
        timeout: int | None = DEFAULT_TIMEOUT,
    ) -> subprocess.CompletedProcess[str]:
        """Run a git command inside the repository.

        Args:
            *args: Git command arguments
            check: Whether to raise on non-zero exit
            timeout: Timeout in seconds, or None for no limit

        Returns:
            Completed process result
        """
        return run_git("-C", str(self.repo_path), *args, check=check, timeout=timeout)

    def current_branch(self) -> str:
        """Get the current branch name.

        Returns:
            Current branch name
        """
        result = self._run("rev-parse", "--abbrev-ref", "HEAD")
        return result.stdout.strip()

    def current_commit(self) -> str:
        """Get the current commit SHA.

        Returns:
            Full 40-character commit SHA
        """
        result = self._run("rev-parse", "HEAD")
        return result.stdout.strip()
