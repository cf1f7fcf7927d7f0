"""Filesystem helpers: mode-preserving copy and cache directory lookup."""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

from publisher.constants import CACHE_APP_DIR, CACHE_DIR_ENV, REPOS_DIR


def copy_path(src: Path, dst: Path) -> None:
    """Copy a file or a whole directory tree from *src* to *dst*.

    File mode bits are preserved. Missing parent directories of *dst*
    are created and existing directories are merged into.

    Args:
        src: File or directory to copy.
        dst: Destination path (not the destination's parent).

    Raises:
        OSError: If *src* does not exist or any copy fails.
    """
    if src.is_dir():
        shutil.copytree(src, dst, copy_function=shutil.copy, dirs_exist_ok=True)
        return

    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy(src, dst)


def user_cache_dir() -> Path:
    """Return the per-user cache root for the current platform.

    ``$XDG_CACHE_HOME`` (or ``~/.cache``) on Linux and other Unixes,
    ``~/Library/Caches`` on macOS and ``%LOCALAPPDATA%`` on Windows.

    Raises:
        OSError: If the location cannot be determined.
    """
    if sys.platform == "win32":
        local = os.environ.get("LOCALAPPDATA", "")
        if not local:
            raise OSError("%LOCALAPPDATA% is not defined")
        return Path(local)

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches"

    xdg = os.environ.get("XDG_CACHE_HOME", "")
    if xdg and os.path.isabs(xdg):
        return Path(xdg)
    return Path.home() / ".cache"


def repos_dir() -> Path:
    """Directory holding one cached clone per ``owner/name``.

    ``$PUBLISHER_CACHE_DIR`` replaces the platform cache root when set.
    """
    override = os.environ.get(CACHE_DIR_ENV, "")
    root = Path(override) if override else user_cache_dir()
    return root / CACHE_APP_DIR / REPOS_DIR
