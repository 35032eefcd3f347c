# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Classification of Groovy source files."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

BEANS_PATTERN = re.compile(r"beans\s*\{")
MAIN_METHOD_PATTERN = re.compile(r"static\s+void\s+main\s*\(")
POGO_PATTERN = re.compile(r"class\s+\w+[\s\w]*\{")
SHEBANG_PATTERN = re.compile(r"^#!")
LOGBACK_CONFIG_PATTERN = re.compile(r"ch/qos/logback/.*\.groovy$")

# Larger files are treated as empty when classifying.
MAX_SCAN_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class GroovySource:
    """A ``.groovy`` file and the traits detection cares about."""

    path: Path
    content: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Read the file contents once so each trait check reuses them."""

        object.__setattr__(self, "content", _read_source(self.path))

    @property
    def is_beans(self) -> bool:
        """Return whether the file declares a ``beans {}`` block."""

        return BEANS_PATTERN.search(self.content) is not None

    @property
    def has_main_method(self) -> bool:
        """Return whether the file declares ``static void main(``."""

        return MAIN_METHOD_PATTERN.search(self.content) is not None

    @property
    def is_pogo(self) -> bool:
        """Return whether the file declares a class."""

        return POGO_PATTERN.search(self.content) is not None

    @property
    def has_shebang(self) -> bool:
        """Return whether the first line is a ``#!`` interpreter line."""

        first_line = self.content.split("\n", 1)[0]
        return SHEBANG_PATTERN.match(first_line) is not None

    @property
    def is_script(self) -> bool:
        """Return whether the file can be run directly by ``groovy``."""

        return self.has_main_method or self.has_shebang or not self.is_pogo


def _read_source(path: Path) -> str:
    """Return the text of ``path``, or ``""`` when unreadable or too large.

    Args:
        path: Groovy source file.

    Returns:
        str: Decoded content with undecodable bytes replaced.

    """

    try:
        if path.stat().st_size > MAX_SCAN_BYTES:
            return ""
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""


def is_logback_config(path: Path) -> bool:
    """Return whether ``path`` is a bundled logback Groovy configuration."""

    return LOGBACK_CONFIG_PATTERN.search(path.as_posix()) is not None


def find_groovy_sources(root: Path, *, recursive: bool = True) -> list[GroovySource]:
    """Return the Groovy sources below ``root`` in path order, skipping logback configs."""

    if not root.is_dir():
        return []
    if recursive:
        paths = [
            Path(current) / filename
            for current, _dirs, filenames in os.walk(root)
            for filename in filenames
            if filename.endswith(".groovy")
        ]
    else:
        paths = [path for path in root.iterdir() if path.is_file() and path.suffix == ".groovy"]
    return [GroovySource(path) for path in sorted(paths) if not is_logback_config(path)]


__all__ = ["GroovySource", "find_groovy_sources", "is_logback_config"]
