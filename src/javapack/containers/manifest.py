# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsing of ``META-INF/MANIFEST.MF`` files on disk and inside archives."""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterator, Mapping
from pathlib import Path

LOGGER = logging.getLogger(__name__)

MANIFEST_ENTRY = "META-INF/MANIFEST.MF"


class JarManifest(Mapping[str, str]):
    """Main section attributes of a JAR manifest.

    Continuation lines (a leading single space) are joined onto the previous
    attribute. Per-entry sections after the first blank line are ignored.
    """

    def __init__(self, attributes: Mapping[str, str] | None = None) -> None:
        """Store a copy of ``attributes``.

        Args:
            attributes: Main section attributes keyed by name.

        """

        self._attributes = dict(attributes or {})

    @classmethod
    def parse(cls, text: str) -> JarManifest:
        """Parse the main section of manifest ``text``.

        Args:
            text: Manifest content.

        Returns:
            JarManifest: Attributes up to the first blank line after the header.

        """

        attributes: dict[str, str] = {}
        current: str | None = None
        for raw_line in text.splitlines():
            line = raw_line.rstrip("\r")
            if not line.strip():
                if attributes:
                    break
                continue
            if line.startswith(" ") and current is not None:
                attributes[current] += line[1:]
                continue
            key, separator, value = line.partition(":")
            if not separator:
                continue
            current = key.strip()
            attributes[current] = value.strip()
        return cls(attributes)

    @classmethod
    def from_file(cls, path: Path) -> JarManifest:
        """Return the manifest at ``path`` or an empty manifest when unreadable."""

        try:
            return cls.parse(path.read_text(encoding="utf-8", errors="replace"))
        except OSError:
            return cls()

    @classmethod
    def from_directory(cls, root: Path) -> JarManifest:
        """Return the manifest of the exploded application rooted at ``root``."""

        return cls.from_file(root / MANIFEST_ENTRY)

    @classmethod
    def from_archive(cls, archive: Path) -> JarManifest:
        """Return the manifest embedded in ``archive`` or an empty manifest."""

        try:
            with zipfile.ZipFile(archive) as handle:
                data = handle.read(MANIFEST_ENTRY)
        except (OSError, KeyError, zipfile.BadZipFile) as exc:
            LOGGER.debug("no readable manifest in %s: %s", archive, exc)
            return cls()
        return cls.parse(data.decode("utf-8", errors="replace"))

    @property
    def main_class(self) -> str | None:
        """Return the ``Main-Class`` attribute, or ``None`` when absent or blank."""

        return self._attributes.get("Main-Class") or None

    def __getitem__(self, key: str) -> str:
        """Return the attribute named ``key``."""

        return self._attributes[key]

    def __iter__(self) -> Iterator[str]:
        """Iterate over attribute names."""

        return iter(self._attributes)

    def __len__(self) -> int:
        """Return the number of attributes."""

        return len(self._attributes)


__all__ = ["JarManifest", "MANIFEST_ENTRY"]
