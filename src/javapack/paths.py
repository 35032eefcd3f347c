# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate build-time dependency paths into runtime references."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath

from .constants import RUNTIME_APP_EXPRESSION, RUNTIME_DEPS_EXPRESSION, RUNTIME_DEPS_ROOT


class TranslationTarget(str, Enum):
    """Where a translated path will be referenced from.

    ``EARLY`` references live in scripts that run before the platform exports
    ``$DEPS_DIR`` and therefore need the literal runtime location. ``PORTABLE``
    references are resolved through the environment variable.
    """

    PORTABLE = "portable"
    EARLY = "early"


@dataclass(frozen=True, slots=True)
class StagingRuntimeMapping:
    """Relationship between the build-time dependency root and its runtime location."""

    build_root: Path
    dependency_index: str
    runtime_root_expression: str = RUNTIME_DEPS_EXPRESSION
    runtime_root_literal: str = RUNTIME_DEPS_ROOT

    @property
    def slot_root(self) -> Path:
        """Return the build-time directory of the dependency slot."""

        return self.build_root / self.dependency_index


class PathTranslator:
    """Rewrite staged paths under one dependency slot for use at runtime."""

    def __init__(self, mapping: StagingRuntimeMapping, *, app_root: Path | None = None) -> None:
        """Store the slot mapping used for every translation.

        Args:
            mapping: Build-time slot and its runtime location.
            app_root: Application directory, mapped to ``$HOME`` when given.

        """

        self._mapping = mapping
        self._app_root = app_root

    @property
    def mapping(self) -> StagingRuntimeMapping:
        """Return the slot mapping this translator rewrites against."""

        return self._mapping

    def relative(self, path: Path | str) -> PurePosixPath:
        """Return ``path`` relative to the dependency slot.

        Raises:
            ValueError: If ``path`` lies outside the slot.
        """

        slot = self._mapping.slot_root
        try:
            suffix = Path(path).relative_to(slot)
        except ValueError as exc:
            raise ValueError(f"{path} is not inside dependency slot {slot}") from exc
        return PurePosixPath(suffix.as_posix())

    def translate(self, path: Path | str, target: TranslationTarget = TranslationTarget.PORTABLE) -> str:
        """Return the runtime reference for a staged ``path``.

        Args:
            path: Build-time path under the dependency slot.
            target: Whether the reference is consumed before or after the
                platform's environment setup.

        Returns:
            str: ``$DEPS_DIR/<idx>/<suffix>`` or ``/home/vcap/deps/<idx>/<suffix>``.
        """

        root = (
            self._mapping.runtime_root_literal
            if target is TranslationTarget.EARLY
            else self._mapping.runtime_root_expression
        )
        base = f"{root}/{self._mapping.dependency_index}"
        suffix = self.relative(path).as_posix()
        return base if suffix == "." else f"{base}/{suffix}"

    def app_path(self, path: Path | str) -> str:
        """Return ``$HOME/<suffix>`` for a file inside the application directory."""

        if self._app_root is None:
            raise ValueError("translator has no application root configured")
        suffix = Path(path).relative_to(self._app_root).as_posix()
        return RUNTIME_APP_EXPRESSION if suffix == "." else f"{RUNTIME_APP_EXPRESSION}/{suffix}"

    def resolve(self, reference: str, runtime_root: Path) -> Path:
        """Resolve a translated ``reference`` against a simulated runtime deps root.

        Raises:
            ValueError: If ``reference`` was not produced by this translator.
        """

        for prefix in (self._mapping.runtime_root_expression, self._mapping.runtime_root_literal):
            if reference == prefix:
                return runtime_root
            if reference.startswith(f"{prefix}/"):
                return runtime_root.joinpath(*PurePosixPath(reference[len(prefix) + 1 :]).parts)
        raise ValueError(f"{reference!r} is not a runtime dependency reference")


__all__ = ["PathTranslator", "StagingRuntimeMapping", "TranslationTarget"]
