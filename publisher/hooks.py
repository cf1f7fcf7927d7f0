"""Execution of the configured pre-run script."""

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

from publisher.exceptions import HookExecutionError
from publisher.logging import get_logger


@dataclass
class CommandResult:
    """Result of command execution."""

    command: list[str]
    exit_code: int
    stderr: str
    duration_ms: int

    @property
    def success(self) -> bool:
        return self.exit_code == 0


def split_command(command: str) -> list[str]:
    """Split a command string into program and arguments.

    Raises:
        HookExecutionError: If the string is empty or has unbalanced quotes
    """
    try:
        args = shlex.split(command)
    except ValueError as e:
        raise HookExecutionError(f"cannot parse preRun script: {e}", command=command) from e
    if not args:
        raise HookExecutionError("preRun script is empty", command=command)
    return args


def run_pre_run_script(
    command: str,
    cwd: Path,
    logger: logging.Logger | None = None,
) -> CommandResult:
    """Run the pre-run script in *cwd* without a shell.

    Standard output is passed through to the terminal; standard error is
    captured so it can be reported when the script fails. No timeout is
    applied.

    Args:
        command: Command line from the config's ``preRun`` key
        cwd: Working directory, the source project's root
        logger: Logger for progress messages

    Returns:
        CommandResult of the successful run

    Raises:
        HookExecutionError: If the program cannot be started or exits non-zero
    """
    logger = logger or get_logger("hooks")
    args = split_command(command)
    logger.debug(f"Running preRun script in {cwd}", extra={"command": command})

    start = time.monotonic()
    try:
        proc = subprocess.run(
            args,
            cwd=cwd,
            stdout=None,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as e:
        raise HookExecutionError(
            f"failed to execute preRun script: {e}", command=command
        ) from e

    result = CommandResult(
        command=args,
        exit_code=proc.returncode,
        stderr=proc.stderr or "",
        duration_ms=int((time.monotonic() - start) * 1000),
    )

    if not result.success:
        raise HookExecutionError(
            f"failed to execute preRun script, exit code {result.exit_code}, "
            f"stderr: {result.stderr.strip()}",
            command=command,
            exit_code=result.exit_code,
            stderr=result.stderr,
        )

    logger.debug(f"preRun script finished in {result.duration_ms}ms")
    return result
