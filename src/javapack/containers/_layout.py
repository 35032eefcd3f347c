# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem helpers shared by container providers."""

from __future__ import annotations

import logging
import stat
from collections.abc import Iterable
from pathlib import Path

LOGGER = logging.getLogger(__name__)

APPLICATION_ROOT = "application-root"


def root_files(directory: Path, suffix: str) -> list[Path]:
    """Return the files directly inside ``directory`` ending with ``suffix``.

    Args:
        directory: Directory to list; missing directories yield nothing.
        suffix: File name suffix such as ``.jar``.

    Returns:
        list[Path]: Matching files in name order.

    """

    if not directory.is_dir():
        return []
    return sorted(path for path in directory.iterdir() if path.is_file() and path.name.endswith(suffix))


def start_scripts(bin_dir: Path) -> list[Path]:
    """Return the non-Windows launch scripts in ``bin_dir``.

    Args:
        bin_dir: Distribution ``bin`` directory.

    Returns:
        list[Path]: Scripts other than ``*.bat`` files, in name order.

    """

    if not bin_dir.is_dir():
        return []
    return sorted(path for path in bin_dir.iterdir() if path.is_file() and path.suffix != ".bat")


def make_executable(paths: Iterable[Path]) -> None:
    """Add execute permission for everyone to each of ``paths``.

    Args:
        paths: Files to mark executable. Failures are logged and skipped.

    """

    for path in paths:
        try:
            path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as exc:
            LOGGER.warning("could not make %s executable: %s", path, exc)


def locate_home(root: Path, marker: str) -> Path | None:
    """Return ``root`` or its first child containing ``marker``.

    Distribution archives usually unpack into a single versioned directory.

    Args:
        root: Directory a dependency was installed into.
        marker: Relative path identifying the home, such as ``bin/catalina.sh``.

    Returns:
        Path | None: The home directory, or ``None`` when ``marker`` is absent.

    """

    if (root / marker).exists():
        return root
    if not root.is_dir():
        return None
    for child in sorted(root.iterdir()):
        if child.is_dir() and (child / marker).exists():
            return child
    return None


def relative(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` with forward slashes.

    Args:
        path: Path inside ``root``.
        root: Base directory.

    Returns:
        str: POSIX-style relative path.

    Raises:
        ValueError: If ``path`` is not inside ``root``.

    """

    return path.relative_to(root).as_posix()


__all__ = ["APPLICATION_ROOT", "locate_home", "make_executable", "relative", "root_files", "start_scripts"]
