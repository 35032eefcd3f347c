# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decide whether an application tree is something this buildpack can stage."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import NamedTuple

# Directories nested deeper than this are not searched for class files.
MAX_CLASS_SEARCH_DEPTH = 100


class Indicator(NamedTuple):
    """One piece of evidence that a tree holds a Java application."""

    evidence: str
    matches: Callable[[Path], bool]


def _exists(*parts: str) -> Callable[[Path], bool]:
    """Return a check for the path ``parts`` below the root."""

    return lambda root: root.joinpath(*parts).exists()


def _glob(pattern: str) -> Callable[[Path], bool]:
    """Return a check for any root entry matching ``pattern``."""

    return lambda root: any(root.glob(pattern))


def _has_class_files(root: Path) -> bool:
    """Return whether any ``.class`` file lies below ``root``."""

    for current, dirs, files in os.walk(root):
        if any(name.endswith(".class") for name in files):
            return True
        if len(os.path.relpath(current, root)) > MAX_CLASS_SEARCH_DEPTH:
            dirs[:] = []
    return False


def _has_distribution(base: str) -> Callable[[Path], bool]:
    """Return a check for a ``bin`` start script beside ``lib`` under ``base``."""

    def matches(root: Path) -> bool:
        bin_dir = root / base / "bin"
        if not (bin_dir.is_dir() and (root / base / "lib").is_dir()):
            return False
        return any(entry.is_file() and entry.suffix != ".bat" for entry in bin_dir.iterdir())

    return matches


def _has_procfile(root: Path) -> bool:
    """Return whether ``root`` holds a non-empty ``Procfile``."""

    procfile = root / "Procfile"
    return procfile.is_file() and procfile.stat().st_size > 0


INDICATORS: tuple[Indicator, ...] = (
    Indicator("WEB-INF directory", _exists("WEB-INF")),
    Indicator("WAR archive", _glob("*.war")),
    Indicator("Maven project", _exists("pom.xml")),
    Indicator("Gradle project", _exists("build.gradle")),
    Indicator("Gradle Kotlin project", _exists("build.gradle.kts")),
    Indicator("JAR archive", _glob("*.jar")),
    Indicator("BOOT-INF directory", _exists("BOOT-INF")),
    Indicator("JAR manifest", _exists("META-INF", "MANIFEST.MF")),
    Indicator("compiled classes", _has_class_files),
    Indicator("Groovy sources", _glob("*.groovy")),
    Indicator("Play start script", _exists("start")),
    Indicator("Play dist start script", _exists("application-root", "start")),
    Indicator("Play staged start script", _exists("staged-app", "start")),
    Indicator("Ratpack distribution", _glob("application-root/lib/ratpack-core-*.jar")),
    Indicator("application-root libraries", _glob("application-root/lib/*.jar")),
    Indicator("distribution layout", _has_distribution(".")),
    Indicator("application-root distribution", _has_distribution("application-root")),
    Indicator("Procfile", _has_procfile),
)


def detect_application(build_dir: Path) -> str | None:
    """Return the first evidence of a Java application in ``build_dir``, or ``None``.

    Indicators are checked in a fixed order from the most to the least specific.
    """

    if not build_dir.is_dir():
        return None
    for indicator in INDICATORS:
        if indicator.matches(build_dir):
            return indicator.evidence
    return None


__all__ = ["INDICATORS", "Indicator", "detect_application"]
