# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Constants describing the staging layout and runtime conventions."""

from __future__ import annotations

from typing import Final

RUNTIME_DEPS_EXPRESSION: Final[str] = "$DEPS_DIR"
RUNTIME_DEPS_ROOT: Final[str] = "/home/vcap/deps"
RUNTIME_APP_EXPRESSION: Final[str] = "$HOME"

PROFILE_D_DIRNAME: Final[str] = "profile.d"
JAVA_OPTS_DIRNAME: Final[str] = "java_opts"
ENV_DIRNAME: Final[str] = "env"
SUPPLY_MARKER_FILENAME: Final[str] = "javapack-supply.json"
RELEASE_DESCRIPTOR_PATH: Final[str] = "tmp/java-buildpack-release-step.yml"
JAVA_OPTS_SCRIPT_NAME: Final[str] = "00_java_opts.sh"

JRE_DIRNAME: Final[str] = "jre"
DEFAULT_JAVA_MAJOR_VERSION: Final[int] = 17

CLASS_SUFFIXES: Final[tuple[str, ...]] = (".class", ".groovy")
ARCHIVE_SUFFIXES: Final[tuple[str, ...]] = (".jar", ".war")
LOADED_CLASS_PERCENT: Final[int] = 35
JAVA9_CLASS_COUNT: Final[int] = 42215
DEFAULT_CLASS_COUNT: Final[int] = 18000
DEFAULT_STACK_THREADS: Final[int] = 250
DEFAULT_HEADROOM: Final[int] = 0

MEMORY_CALCULATOR_PREFIX: Final[str] = "java-buildpack-memory-calculator-"
JVMKILL_PREFIX: Final[str] = "jvmkill-"

__all__ = [
    "ARCHIVE_SUFFIXES",
    "CLASS_SUFFIXES",
    "DEFAULT_CLASS_COUNT",
    "DEFAULT_HEADROOM",
    "DEFAULT_JAVA_MAJOR_VERSION",
    "DEFAULT_STACK_THREADS",
    "ENV_DIRNAME",
    "JAVA9_CLASS_COUNT",
    "JAVA_OPTS_DIRNAME",
    "JAVA_OPTS_SCRIPT_NAME",
    "JRE_DIRNAME",
    "JVMKILL_PREFIX",
    "LOADED_CLASS_PERCENT",
    "MEMORY_CALCULATOR_PREFIX",
    "PROFILE_D_DIRNAME",
    "RELEASE_DESCRIPTOR_PATH",
    "RUNTIME_APP_EXPRESSION",
    "RUNTIME_DEPS_EXPRESSION",
    "RUNTIME_DEPS_ROOT",
    "SUPPLY_MARKER_FILENAME",
]
