# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Loaded-class estimation and the deferred memory calculator command."""

from __future__ import annotations

import logging
import os
import shutil
import stat
import zipfile
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from ..constants import (
    ARCHIVE_SUFFIXES,
    CLASS_SUFFIXES,
    DEFAULT_CLASS_COUNT,
    DEFAULT_HEADROOM,
    DEFAULT_STACK_THREADS,
    JAVA9_CLASS_COUNT,
    LOADED_CLASS_PERCENT,
    MEMORY_CALCULATOR_PREFIX,
)
from ..errors import InstallError, NonFatalToolingError
from ..models import HeapProfile
from ..providers.base import ProviderContext

LOGGER = logging.getLogger(__name__)

CALCULATOR_DEPENDENCY = "memory-calculator"
CALCULATOR_BINARY_NAMES = (
    "java-buildpack-memory-calculator",
    "memory-calculator-linux",
    "memory-calculator-darwin",
)


def _iter_files(root: Path) -> Iterator[Path]:
    """Yield every file below ``root``."""

    for directory, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            yield Path(directory, filename)


def count_archive_entries(archive: Path) -> int:
    """Return the class and script entries directly inside ``archive``.

    Nested archives are not opened. Unreadable archives count as zero.

    Args:
        archive: Path of a zip-compatible archive.

    Returns:
        int: Number of compiled class and Groovy script entries.
    """

    try:
        with zipfile.ZipFile(archive) as handle:
            return sum(1 for name in handle.namelist() if name.endswith(CLASS_SUFFIXES))
    except (OSError, RuntimeError, ValueError, zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        LOGGER.debug("skipping unreadable archive %s: %s", archive, exc)
        return 0


def count_classes(root: Path) -> int:
    """Return the raw class count for the application tree under ``root``."""

    total = 0
    for path in _iter_files(root):
        if path.name.endswith(CLASS_SUFFIXES):
            total += 1
        elif path.name.endswith(ARCHIVE_SUFFIXES):
            total += count_archive_entries(path)
    return total


def estimate_loaded_classes(raw_count: int, java_major_version: int) -> int:
    """Scale ``raw_count`` to the number of classes a typical run loads.

    Runtimes from Java 9 onwards load their own module classes on top of the
    application's, which are added before scaling.
    """

    total = raw_count + (JAVA9_CLASS_COUNT if java_major_version >= 9 else 0)
    return total * LOADED_CLASS_PERCENT // 100


def _as_int(value: Any) -> int | None:
    """Return ``value`` as an integer, or ``None`` when it is not numeric."""

    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class HeapCalculator:
    """Install the memory calculator and build its start-time invocation."""

    def __init__(
        self,
        context: ProviderContext,
        jre_dir: Path,
        java_major_version: int,
        settings: Mapping[str, Any] | None = None,
    ) -> None:
        """Bind the calculator to one runtime installation.

        Args:
            context: Provider collaborators.
            jre_dir: Slot directory of the installed JRE.
            java_major_version: Major version of that JRE.
            settings: ``memory_calculator`` section of the runtime override.

        """

        self._context = context
        self._jre_dir = jre_dir
        self._java_major_version = java_major_version
        self._settings = settings or {}

    @property
    def bin_dir(self) -> Path:
        """Return the directory the calculator binary is installed into."""

        return self._jre_dir / "bin"

    @property
    def thread_budget(self) -> int:
        """Return the thread count, from the environment, the override or 250."""

        configured = self._context.config.integer("MEMORY_CALCULATOR_STACK_THREADS")
        if configured is None:
            configured = _as_int(self._settings.get("stack_threads"))
        return DEFAULT_STACK_THREADS if configured is None else configured

    @property
    def headroom(self) -> int:
        """Return the head-room percentage, from the environment, the override or 0."""

        configured = self._context.config.integer("MEMORY_CALCULATOR_HEADROOM")
        if configured is None:
            configured = _as_int(self._settings.get("headroom"))
        return DEFAULT_HEADROOM if configured is None else configured

    def supply(self) -> Path:
        """Install the calculator binary as ``<jre>/bin/java-buildpack-memory-calculator-<version>``.

        Raises:
            InstallError: If the installed dependency contains no calculator binary.
        """

        descriptor = self._context.catalog.default_version(CALCULATOR_DEPENDENCY)
        scratch = self._context.stager.dep_dir / "tmp" / CALCULATOR_DEPENDENCY
        shutil.rmtree(scratch, ignore_errors=True)
        self._context.install(descriptor, scratch)
        try:
            binary = next(
                (scratch / name for name in CALCULATOR_BINARY_NAMES if (scratch / name).is_file()),
                None,
            )
            if binary is None:
                raise InstallError(f"no memory calculator binary found in {descriptor.filename}")
            self.bin_dir.mkdir(parents=True, exist_ok=True)
            for previous in self.bin_dir.glob(f"{MEMORY_CALCULATOR_PREFIX}*"):
                previous.unlink()
            target = self.bin_dir / f"{MEMORY_CALCULATOR_PREFIX}{descriptor.version}"
            shutil.copyfile(binary, target)
            target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)
        return target

    def locate(self) -> Path | None:
        """Return the installed calculator binary, or ``None`` when absent."""

        if not self.bin_dir.is_dir():
            return None
        candidates = sorted(self.bin_dir.glob(f"{MEMORY_CALCULATOR_PREFIX}*"))
        return candidates[0] if candidates else None

    def profile(self) -> HeapProfile:
        """Count the application's classes and build the calculator inputs.

        When nothing is counted on a pre-9 runtime a default class count is used.

        Returns:
            HeapProfile: Loaded class estimate, thread budget and head-room.

        """

        raw = count_classes(self._context.build_dir)
        if raw == 0 and self._java_major_version < 9:
            estimate = DEFAULT_CLASS_COUNT * LOADED_CLASS_PERCENT // 100
        else:
            estimate = estimate_loaded_classes(raw, self._java_major_version)
        LOGGER.debug("counted %d classes, estimating %d loaded", raw, estimate)
        return HeapProfile(
            loaded_class_estimate=estimate,
            thread_budget=self.thread_budget,
            headroom=self.headroom,
        )

    def command(self) -> str:
        """Return the shell fragment that sizes the JVM when the process starts.

        Raises:
            NonFatalToolingError: If the calculator was never installed.
        """

        binary = self.locate()
        if binary is None:
            raise NonFatalToolingError(f"memory calculator not installed under {self.bin_dir}")
        profile = self.profile()
        arguments = [
            self._context.translator.translate(binary),
            "--total-memory=$MEMORY_LIMIT",
        ]
        if profile.headroom > 0:
            arguments.append(f"--head-room={profile.headroom}")
        arguments.extend(
            [
                f"--loaded-class-count={profile.loaded_class_estimate}",
                f"--thread-count={profile.thread_budget}",
                '--jvm-options="$JAVA_OPTS"',
            ]
        )
        invocation = " ".join(arguments)
        return (
            f"CALCULATED_MEMORY=$({invocation})"
            " && echo JVM Memory Configuration: $CALCULATED_MEMORY"
            ' && JAVA_OPTS="$JAVA_OPTS $CALCULATED_MEMORY"'
            " && MALLOC_ARENA_MAX=2"
        )


__all__ = [
    "CALCULATOR_DEPENDENCY",
    "HeapCalculator",
    "count_archive_entries",
    "count_classes",
    "estimate_loaded_classes",
]
