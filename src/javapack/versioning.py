# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Helpers for matching and ordering dependency versions."""

from __future__ import annotations

import re
from collections.abc import Iterable

from packaging.version import InvalidVersion, Version

from .errors import VersionNotFoundError

WILDCARD_SEGMENTS = frozenset({"*", "x", "+"})

VersionKey = tuple[tuple[int, ...], int, tuple[tuple[int, int, str], ...]]


class VersionResolver:
    """Resolve version constraints against catalog versions.

    Constraints are either literal versions (``17.0.13``) or wildcard patterns in
    which a segment is replaced by ``*``, ``x`` or ``+`` (``17.*``, ``10.x``,
    ``11.+``). A trailing wildcard matches any number of remaining segments,
    including none. Candidates are ordered segment by segment as integers so that
    ``17.0.13`` sorts above ``17.0.9``.
    """

    _RELEASE = re.compile(r"^(\d+(?:\.\d+)*)(.*)$")
    _TOKEN = re.compile(r"\d+|\D+")

    def normalize(self, raw: str) -> str:
        """Return the wildcard form of a user supplied runtime selector.

        ``+`` becomes ``*``, values already containing ``*`` are kept, and any
        other value gets ``.*`` appended (``17`` -> ``17.*``).
        """

        value = raw.strip()
        if "+" in value:
            return value.replace("+", "*")
        if "*" in value:
            return value
        return f"{value}.*"

    def is_wildcard(self, constraint: str) -> bool:
        """Return whether any segment of ``constraint`` is a wildcard."""

        return any(segment in WILDCARD_SEGMENTS for segment in constraint.split("."))

    def matches(self, candidate: str, constraint: str) -> bool:
        """Return ``True`` when ``candidate`` satisfies ``constraint``."""

        if not self.is_wildcard(constraint):
            return candidate == constraint
        pattern = constraint.split(".")
        parts = candidate.split(".")
        for index, segment in enumerate(pattern):
            if segment in WILDCARD_SEGMENTS:
                if index == len(pattern) - 1:
                    return True
                if index >= len(parts):
                    return False
                continue
            if index >= len(parts) or parts[index] != segment:
                return False
        return len(parts) == len(pattern)

    def sort_key(self, version: str) -> VersionKey:
        """Return a key ordering ``version`` numerically.

        Args:
            version: Catalog version such as ``17.0.13``, ``1.8.0_422`` or ``3.0.0-RC1``.

        Returns:
            VersionKey: The dotted numeric release, a stability rank placing
            pre-releases below the matching final release, and the trailing
            qualifier split into digit and text runs. Digit runs compare as
            integers, so ``1.8.0_422`` sorts above ``1.8.0_99``.
        """

        match = self._RELEASE.match(version.strip())
        if match is None:
            release: tuple[int, ...] = ()
            qualifier = version.strip()
        else:
            release = tuple(int(part) for part in match.group(1).split("."))
            qualifier = match.group(2)
        tokens = tuple(
            (1, int(token), "") if token.isdigit() else (0, 0, token.lower())
            for token in self._TOKEN.findall(qualifier)
        )
        return release, self._stability(version), tokens

    def highest(self, versions: Iterable[str]) -> str | None:
        """Return the highest of ``versions``, or ``None`` when there are none."""

        candidates = list(versions)
        if not candidates:
            return None
        return max(candidates, key=self.sort_key)

    def resolve(self, name: str, constraint: str, versions: Iterable[str]) -> str:
        """Return the highest entry of ``versions`` matching ``constraint``.

        Args:
            name: Catalog name searched, used for error reporting.
            constraint: Literal version or wildcard pattern.
            versions: Candidate versions available for ``name``.

        Returns:
            str: The numerically highest matching version.

        Raises:
            VersionNotFoundError: If no candidate satisfies ``constraint``.
        """

        available = list(versions)
        survivors = [candidate for candidate in available if self.matches(candidate, constraint)]
        selected = self.highest(survivors)
        if selected is None:
            raise VersionNotFoundError(constraint, name, available)
        return selected

    @staticmethod
    def _stability(version: str) -> int:
        # Vendor build qualifiers (``_422``, ``+11``) that PEP 440 rejects are final releases.
        try:
            return 0 if Version(version).is_prerelease else 1
        except InvalidVersion:
            return 1


__all__ = ["VersionKey", "VersionResolver", "WILDCARD_SEGMENTS"]
