"""Workspace synchronization: replace a clone's contents with build output.

The synchronizer owns the working directory of a prepared target
repository. It empties everything except ``.git``, then copies the
files selected by the config's ``files`` globs from the source project,
dropping the first path component of every nested match so that
``dist/index.html`` lands at ``index.html``.
"""

from __future__ import annotations

import fnmatch
import glob
import logging
import shutil
from collections.abc import Iterable, Sequence
from pathlib import Path, PurePosixPath

from publisher.constants import CNAME_FILE, GIT_DIR_NAME
from publisher.exceptions import FileOperationError
from publisher.fs_utils import copy_path
from publisher.logging import get_logger


def _bad_pattern(pattern: str, reason: str) -> FileOperationError:
    return FileOperationError(f"invalid file pattern {pattern!r}: {reason}", path=pattern)


def _class_char(pattern: str, i: int) -> int:
    """Consume one character of a ``[...]`` class, returning the next index."""
    if i >= len(pattern):
        raise _bad_pattern(pattern, "unterminated '['")
    if pattern[i] in "-]":
        raise _bad_pattern(pattern, f"unexpected {pattern[i]!r} in character class")
    if pattern[i] == "\\":
        i += 1
    i += 1
    if i >= len(pattern):
        raise _bad_pattern(pattern, "unterminated '['")
    return i


def _skip_class(pattern: str, i: int) -> int:
    """Validate the character class opening at *i*, returning the index past it."""
    i += 1
    if i < len(pattern) and pattern[i] in "!^":
        i += 1
    ranges = 0
    while not (pattern[i:i + 1] == "]" and ranges):
        i = _class_char(pattern, i)
        if pattern[i] == "-":
            i = _class_char(pattern, i + 1)
        ranges += 1
    return i + 1


def validate_pattern(pattern: str) -> None:
    """Reject malformed glob patterns.

    :mod:`glob` treats malformed classes and a trailing backslash
    literally; these are reported as errors instead. A class must hold at
    least one character or range, and ``-`` or ``]`` may not start a
    range or end one.

    Raises:
        FileOperationError: If the pattern is malformed or absolute
    """
    if not pattern or Path(pattern).is_absolute():
        raise _bad_pattern(pattern, "must be a non-empty relative path")

    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            if i + 1 == len(pattern):
                raise _bad_pattern(pattern, "trailing escape")
            i += 2
        elif char == "[":
            i = _skip_class(pattern, i)
        else:
            i += 1


def resolve_file_set(patterns: Iterable[str], base_dir: Path) -> list[Path]:
    """Expand glob patterns relative to *base_dir*.

    Matches of each pattern are sorted; the per-pattern lists are
    concatenated in pattern order and duplicates are kept. ``*`` and
    ``**`` both match within a single path component, and hidden entries
    are matched.

    Args:
        patterns: Shell-style glob patterns
        base_dir: Directory the patterns are relative to

    Returns:
        Absolute paths of the matched files and directories

    Raises:
        FileOperationError: If a pattern is malformed
    """
    base_dir = Path(base_dir)
    files: list[Path] = []
    for pattern in patterns:
        validate_pattern(pattern)
        matches = glob.glob(pattern, root_dir=base_dir, include_hidden=True)
        files.extend(base_dir / match for match in sorted(matches))
    return files


def apply_exclusions(files: Sequence[Path], patterns: Iterable[str], base_dir: Path) -> list[Path]:
    """Drop files whose *base_dir*-relative path matches an exclude glob.

    Matching uses :func:`fnmatch.fnmatchcase` against the POSIX form of the
    relative path, so ``*`` may span directory separators.
    """
    patterns = list(patterns)
    if not patterns:
        return list(files)

    kept = []
    for path in files:
        rel = path.relative_to(base_dir).as_posix()
        if not any(fnmatch.fnmatchcase(rel, pattern) for pattern in patterns):
            kept.append(path)
    return kept


def remap_destination(source_path: str | PurePosixPath) -> PurePosixPath:
    """Map a project-relative source path to its place in the target repo.

    A single-component path is kept as is; otherwise the first component
    (typically the build output directory) is dropped.

    Examples:
        ``"a"`` -> ``"a"``, ``"dist/index.html"`` -> ``"index.html"``,
        ``"dist/assets/app.js"`` -> ``"assets/app.js"``
    """
    parts = PurePosixPath(source_path).parts
    if len(parts) <= 1:
        return PurePosixPath(source_path)
    return PurePosixPath(*parts[1:])


class WorkspaceSynchronizer:
    """Repopulates a target repository's working directory."""

    def __init__(self, repo_path: str | Path, logger: logging.Logger | None = None) -> None:
        """Initialize the synchronizer.

        Args:
            repo_path: Root of the prepared target repository
            logger: Logger for progress messages
        """
        self.repo_path = Path(repo_path)
        self.logger = logger or get_logger("sync")

    def empty_working_directory(self) -> int:
        """Remove every top-level entry except the ``.git`` directory.

        Returns:
            Number of entries removed

        Raises:
            FileOperationError: If listing or a removal fails. Entries removed
                before the failure stay removed.
        """
        self.logger.debug(f"Emptying directory {self.repo_path}")
        try:
            entries = sorted(self.repo_path.iterdir())
        except OSError as e:
            raise FileOperationError(
                f"failed to read contents of directory {str(self.repo_path)!r}: {e}",
                path=str(self.repo_path),
            ) from e

        removed = 0
        for entry in entries:
            if entry.name == GIT_DIR_NAME and entry.is_dir() and not entry.is_symlink():
                continue
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                raise FileOperationError(f"failed to remove {str(entry)!r}: {e}", path=str(entry)) from e
            removed += 1
        return removed

    def copy_all(self, files: Iterable[Path], source_root: Path) -> list[PurePosixPath]:
        """Copy resolved files into the repository at their remapped paths.

        Stops at the first failure, leaving earlier copies in place.

        Args:
            files: Absolute paths under *source_root*
            source_root: Root of the source project

        Returns:
            Destination paths, relative to the repository root

        Raises:
            FileOperationError: If a destination is the repository root, lies
                outside the repository or inside ``.git``, or a copy fails
        """
        source_root = Path(source_root)
        copied = []
        for src in files:
            rel = src.relative_to(source_root).as_posix()
            dst_rel = remap_destination(rel)
            dst = self._checked_destination(rel, dst_rel)

            self.logger.debug(f"Copying {rel}...")
            try:
                copy_path(src, dst)
            except OSError as e:
                raise FileOperationError(
                    f"failed to copy {str(src)!r} to {str(dst_rel)!r}: {e}", path=str(src)
                ) from e
            copied.append(dst_rel)
        return copied

    def _checked_destination(self, rel: str, dst_rel: PurePosixPath) -> Path:
        """Resolve a destination, refusing the repository root, ``.git`` and paths outside the repository."""
        root = self.repo_path.resolve()
        git_dir = root / GIT_DIR_NAME
        dst = (root / dst_rel).resolve()

        if dst == root or root not in dst.parents:
            raise FileOperationError(
                f"refusing to copy {rel!r}: destination {str(dst_rel)!r} is not inside the repository",
                path=rel,
            )
        if dst == git_dir or git_dir in dst.parents:
            raise FileOperationError(
                f"refusing to copy {rel!r} into the repository's {GIT_DIR_NAME} directory",
                path=rel,
            )
        return dst

    def write_custom_domain_marker(self, domain: str) -> Path | None:
        """Write the ``CNAME`` file used by GitHub Pages for custom domains.

        Args:
            domain: Custom domain; nothing is written when empty

        Returns:
            Path of the written file, or None
        """
        if not domain:
            return None

        cname_path = self.repo_path / CNAME_FILE
        try:
            cname_path.write_text(domain)
        except OSError as e:
            raise FileOperationError(
                f"failed to write CNAME file to target repo {self.repo_path}: {e}",
                path=str(cname_path),
            ) from e
        return cname_path
