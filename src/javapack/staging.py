# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem layout shared between the supply and finalize phases."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from .constants import (
    ENV_DIRNAME,
    JAVA_OPTS_DIRNAME,
    PROFILE_D_DIRNAME,
    RELEASE_DESCRIPTOR_PATH,
    SUPPLY_MARKER_FILENAME,
)
from .paths import PathTranslator, StagingRuntimeMapping

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Stager:
    """Directories of one staging run and helpers to write into them.

    ``deps_dir/<deps_idx>`` is the only channel between phases; everything
    finalize needs must be written there (or into the build directory) by supply.
    """

    build_dir: Path
    cache_dir: Path
    deps_dir: Path
    deps_idx: str = "0"
    translator: PathTranslator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Derive the path translator for this slot."""

        object.__setattr__(self, "deps_idx", str(self.deps_idx))
        mapping = StagingRuntimeMapping(build_root=self.deps_dir, dependency_index=self.deps_idx)
        object.__setattr__(self, "translator", PathTranslator(mapping, app_root=self.build_dir))

    @property
    def dep_dir(self) -> Path:
        """Return the dependency slot ``<deps_dir>/<deps_idx>``."""

        return self.deps_dir / self.deps_idx

    @property
    def profile_d_dir(self) -> Path:
        """Return the directory of startup scripts sourced before the application starts."""

        return self.dep_dir / PROFILE_D_DIRNAME

    @property
    def java_opts_dir(self) -> Path:
        """Return the directory of ``NN_<name>.opts`` option fragments."""

        return self.dep_dir / JAVA_OPTS_DIRNAME

    @property
    def env_dir(self) -> Path:
        """Return the directory of environment values for later stages."""

        return self.dep_dir / ENV_DIRNAME

    @property
    def marker_path(self) -> Path:
        """Return the supply marker path inside the slot."""

        return self.dep_dir / SUPPLY_MARKER_FILENAME

    @property
    def release_path(self) -> Path:
        """Return the release descriptor path inside the build directory."""

        return self.build_dir / RELEASE_DESCRIPTOR_PATH

    def provider_dir(self, name: str) -> Path:
        """Return the slot directory owned by provider ``name``.

        Args:
            name: Provider directory name such as ``jre`` or ``tomcat``.

        Returns:
            Path: ``<slot>/<name>``; it is not created.

        """

        return self.dep_dir / name

    def ensure_layout(self) -> None:
        """Create the slot and cache directories when missing."""

        for directory in (self.dep_dir, self.cache_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def clear_generated(self) -> None:
        """Remove startup scripts, option fragments and env files from earlier runs.

        Installed dependencies are left in place; only the directories whose
        content supply and finalize regenerate are emptied.
        """

        for directory in (self.profile_d_dir, self.java_opts_dir, self.env_dir):
            if directory.is_dir():
                shutil.rmtree(directory)
                LOGGER.debug("cleared %s", directory)

    def write_profile_d(self, name: str, content: str) -> Path:
        """Write a startup fragment script sourced before the application starts."""

        self.profile_d_dir.mkdir(parents=True, exist_ok=True)
        target = self.profile_d_dir / name
        target.write_text(content, encoding="utf-8")
        LOGGER.debug("wrote profile.d script %s", target)
        return target

    def write_env_file(self, name: str, content: str) -> Path:
        """Write an environment value that later stages read from ``env/<name>``.

        Args:
            name: Variable name, used as the file name.
            content: Variable value.

        Returns:
            Path: The written file.
        """

        self.env_dir.mkdir(parents=True, exist_ok=True)
        target = self.env_dir / name
        target.write_text(content, encoding="utf-8")
        return target


__all__ = ["Stager"]
