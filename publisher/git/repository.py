"""TargetRepository -- the cached local clone a target is published through."""

from __future__ import annotations

import logging
from pathlib import Path

from publisher.constants import DEFAULT_REMOTE, GITHUB_SSH_URL
from publisher.exceptions import (
    CommitError,
    GitError,
    PushError,
    RepositoryPreparationError,
)
from publisher.git.base import GitRunner, global_identity, run_git
from publisher.logging import get_logger


class TargetRepository(GitRunner):
    """Working clone of one remote repository, bound to one branch.

    Instances are normally obtained through :meth:`prepare`, which
    guarantees the branch is checked out and matches the remote tip
    with no leftovers from a previous run.
    """

    def __init__(
        self,
        name: str,
        repo_path: str | Path,
        branch: str,
        logger: logging.Logger | None = None,
    ) -> None:
        """Bind to an existing clone.

        Args:
            name: Remote identity in ``owner/name`` form
            repo_path: Path of the local clone
            branch: Branch that is published to
            logger: Logger for progress messages

        Raises:
            GitError: If repo_path is not a git repository
        """
        super().__init__(repo_path)
        self.name = name
        self.branch = branch
        self.logger = logger or get_logger("git.repository")

    @classmethod
    def prepare(
        cls,
        name: str,
        path: str | Path,
        branch: str,
        remote_url: str | None = None,
        logger: logging.Logger | None = None,
    ) -> TargetRepository:
        """Clone the target repository, or refresh an existing clone.

        A missing *path* is cloned fresh and used as is. An existing clone
        is cleaned of untracked files, force-checked-out onto *branch* and
        reset to the remote tip of that branch.

        Args:
            name: Remote identity in ``owner/name`` form
            path: Local clone location
            branch: Branch to publish to
            remote_url: Clone URL; defaults to the GitHub SSH URL for *name*
            logger: Logger for progress messages

        Returns:
            Prepared repository handle

        Raises:
            RepositoryPreparationError: If any step fails
        """
        logger = logger or get_logger("git.repository")
        path = Path(path)
        url = remote_url or GITHUB_SSH_URL.format(repo=name)

        if not path.exists():
            logger.debug(f"Cloning repo {name} to {path}")
            path.parent.mkdir(parents=True, exist_ok=True)
            try:
                run_git(
                    "clone", "--branch", branch, "--single-branch", url, str(path),
                    timeout=None,
                )
            except GitError as e:
                raise _preparation_error("clone", f"failed to clone {name} to {path}", name, e) from e
            return cls(name, path, branch, logger)

        logger.debug(f"Opening repo {name} at path {path}")
        try:
            repo = cls(name, path, branch, logger)
        except GitError as e:
            raise _preparation_error("open", f"failed to open repo at path {path}", name, e) from e

        repo.clean()
        repo.checkout()
        repo.pull()
        return repo

    def clean(self) -> None:
        """Remove untracked files and directories from the working tree."""
        self.logger.debug(f"Cleaning {self.name}")
        try:
            self._run("clean", "-f", "-d")
        except GitError as e:
            raise _preparation_error("clean", f"failed to clean repo {self.name}", self.name, e) from e

    def checkout(self) -> None:
        """Check out the target branch, discarding local modifications."""
        self.logger.debug(f"Checking out branch {self.branch} in {self.name}")
        try:
            self._run("checkout", "--force", self.branch)
        except GitError as e:
            raise _preparation_error(
                "checkout",
                f"failed to checkout branch {self.branch} in repo {self.name}",
                self.name,
                e,
            ) from e

    def pull(self) -> None:
        """Move the branch to the remote tip, fast-forwarding or resetting."""
        self.logger.debug(f"Pulling changes from remote for {self.name}")
        try:
            self._run("fetch", DEFAULT_REMOTE, self.branch, timeout=None)
            self._run("reset", "--hard", "FETCH_HEAD")
        except GitError as e:
            raise _preparation_error(
                "pull", f"failed to pull changes from remote for repo {self.name}", self.name, e
            ) from e

    def commit_changes(self, message: str) -> str | None:
        """Stage the whole working tree and commit it.

        Deleted files are staged along with additions and modifications.
        The global identity is checked first, so an unset identity fails
        even when there is nothing to commit.

        Args:
            message: Commit message

        Returns:
            SHA of the new commit, or None if the tree was unchanged

        Raises:
            CommitError: If the identity is unset or git fails
        """
        try:
            identity = global_identity()
        except GitError as e:
            raise CommitError(e.message, command=e.command, exit_code=e.exit_code) from e

        try:
            self._run("add", "--all")
        except GitError as e:
            raise CommitError(
                f"failed to stage files: {e.message}", command=e.command, exit_code=e.exit_code
            ) from e

        if not self._run("diff", "--cached", "--quiet", check=False).returncode:
            self.logger.warning(f"Nothing to commit in repo {self.name}")
            return None

        try:
            self._run(
                "-c", f"user.name={identity.name}",
                "-c", f"user.email={identity.email}",
                "commit", "--quiet", "--allow-empty-message", "-m", message,
            )
        except GitError as e:
            raise CommitError(
                f"failed to commit changes in repo {self.name}: {e.message}",
                command=e.command,
                exit_code=e.exit_code,
            ) from e

        commit_sha = self.current_commit()
        summary = message.splitlines()[0] if message else ""
        self.logger.info(f"Created commit {commit_sha[:8]}: {summary[:50]}")
        return commit_sha

    def push(self) -> None:
        """Push the branch to ``origin``.

        Raises:
            PushError: On rejection, authentication or network failure
        """
        try:
            self._run("push", DEFAULT_REMOTE, self.branch, timeout=None)
        except GitError as e:
            raise PushError(
                f"failed to push to remote in repo {self.name}: {e.message}",
                command=e.command,
                exit_code=e.exit_code,
            ) from e
        self.logger.debug(f"Pushed to {DEFAULT_REMOTE}/{self.branch}")


def _preparation_error(step: str, message: str, name: str, cause: GitError) -> RepositoryPreparationError:
    return RepositoryPreparationError(
        f"{message}: {cause.message}",
        step=step,
        repo=name,
        command=cause.command,
        exit_code=cause.exit_code,
    )
