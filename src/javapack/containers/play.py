# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Play Framework distributions, staged or packaged, before and after 2.2."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..models import DetectionOutcome
from ..providers.base import ContainerProvider
from ._layout import APPLICATION_ROOT, make_executable, relative, start_scripts

PLAY_JAR_PATTERN = re.compile(r"^(?:com\.typesafe\.)?play(?:\.play)?_.*-(.+)\.jar$")


class PlayKind(str, Enum):
    """Play layouts, split by packaging and by the 2.2 script change."""

    POST22_DIST = "post22-dist"
    POST22_STAGED = "post22-staged"
    PRE22_DIST = "pre22-dist"
    PRE22_STAGED = "pre22-staged"


@dataclass(frozen=True, slots=True)
class PlayLayout:
    """A detected Play layout and the script that starts it."""

    kind: PlayKind
    version: str
    start_script: Path


def play_jar_version(lib_dir: Path) -> str | None:
    """Return the Play version encoded in the framework jar under ``lib_dir``."""

    if not lib_dir.is_dir():
        return None
    for entry in sorted(lib_dir.iterdir()):
        match = PLAY_JAR_PATTERN.match(entry.name)
        if match and entry.is_file():
            return match.group(1)
    return None


def is_post22(version: str) -> bool:
    """Return whether ``version`` uses the 2.2+ ``bin/`` layout."""

    parts = version.split(".")
    if len(parts) < 2:
        return False
    major = _leading_int(parts[0])
    if major == 2:
        return _leading_int(parts[1]) >= 2
    return major > 2


def _leading_int(value: str) -> int:
    """Return the leading digits of ``value`` as an integer, or ``0``."""

    match = re.match(r"\d+", value)
    return int(match.group()) if match else 0


def find_play_layouts(build_dir: Path) -> list[PlayLayout]:
    """Return every Play layout present in ``build_dir``."""

    layouts: list[PlayLayout] = []
    for kind, root in ((PlayKind.POST22_DIST, build_dir / APPLICATION_ROOT), (PlayKind.POST22_STAGED, build_dir)):
        version = play_jar_version(root / "lib")
        scripts = start_scripts(root / "bin")
        if version and is_post22(version) and scripts:
            layouts.append(PlayLayout(kind, version, scripts[0]))
    pre22_candidates = (
        (PlayKind.PRE22_DIST, build_dir / APPLICATION_ROOT / "start", build_dir / APPLICATION_ROOT / "lib"),
        (PlayKind.PRE22_STAGED, build_dir / "start", build_dir / "staged"),
    )
    for kind, script, lib_dir in pre22_candidates:
        version = play_jar_version(lib_dir)
        if version and not is_post22(version) and script.is_file():
            layouts.append(PlayLayout(kind, version, script))
    return layouts


class PlayContainer(ContainerProvider):
    """Start a single staged or packaged Play application through its own script."""

    name = "play"

    def layout(self) -> PlayLayout | None:
        """Return the only Play layout present, or ``None`` when absent or ambiguous."""

        layouts = find_play_layouts(self.build_dir)
        return layouts[0] if len(layouts) == 1 else None

    def detect(self) -> DetectionOutcome:
        """Claim the build directory when exactly one Play layout is present.

        Returns:
            DetectionOutcome: A hit naming the Play version, a miss, or an
            ambiguity listing every layout kind found.

        """

        layouts = find_play_layouts(self.build_dir)
        if len(layouts) > 1:
            return self._ambiguous([layout.kind.value for layout in layouts])
        if not layouts:
            return self._miss()
        return self._hit(f"Play Framework {layouts[0].version}")

    def supply(self) -> None:
        """Make the start script of the detected layout executable."""

        layout = self.layout()
        if layout is None:
            return
        self.log.begin_step("Installing Play Framework %s (%s)", layout.version, layout.kind.value)
        make_executable([layout.start_script])

    def release(self) -> str:
        """Return the start script of the detected layout under ``$HOME``."""

        layout = self.layout()
        if layout is None:
            return ""
        return f"$HOME/{relative(layout.start_script, self.build_dir)}"


__all__ = [
    "PlayContainer",
    "PlayKind",
    "PlayLayout",
    "find_play_layouts",
    "is_post22",
    "play_jar_version",
]
