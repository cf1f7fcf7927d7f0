"""Publisher exception hierarchy."""

from typing import Any


class PublisherError(Exception):
    """Base exception for all publisher errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(PublisherError):
    """Error in the publisher configuration or target selection."""

    pass


class GitError(PublisherError):
    """Error in git operations."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        exit_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.command = command
        self.exit_code = exit_code


class RepositoryPreparationError(GitError):
    """Cloning or refreshing the target repository failed."""

    def __init__(
        self,
        message: str,
        step: str,
        repo: str,
        command: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        super().__init__(message, command=command, exit_code=exit_code)
        self.step = step
        self.repo = repo


class CommitError(GitError):
    """Staging or committing changes in the target repository failed."""

    pass


class PushError(GitError):
    """Pushing the target repository to its remote failed."""

    pass


class HookExecutionError(PublisherError):
    """The pre-run script exited non-zero or could not be started."""

    def __init__(
        self,
        message: str,
        command: str,
        exit_code: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message, {"command": command, "exit_code": exit_code})
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class FileOperationError(PublisherError):
    """A glob, copy, removal or write in the workspace failed."""

    def __init__(
        self, message: str, path: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.path = path


class PublishError(PublisherError):
    """A publish pipeline stage failed.

    The underlying error is available as ``__cause__``.
    """

    def __init__(self, message: str, stage: str) -> None:
        super().__init__(message)
        self.stage = stage
