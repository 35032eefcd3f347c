# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Java runtime providers, the heap calculator and jvmkill."""

from __future__ import annotations

from ..logging import BuildLog
from ..providers.base import ProviderContext
from ..providers.registry import RuntimeRegistry
from .base import JreProvider, major_version_of, read_java_version
from .memory_calculator import HeapCalculator, count_classes, estimate_loaded_classes
from .vendors import GraalVmJre, IbmJre, OpenJdkJre, OracleJre, SapMachineJre, ZingJre, ZuluJre

DEFAULT_RUNTIME = OpenJdkJre.name


def standard_runtimes(context: ProviderContext, *, log: BuildLog | None = None) -> RuntimeRegistry:
    """Return the runtime registry in its fixed order with OpenJDK as the default."""

    providers = (
        OpenJdkJre(context),
        ZuluJre(context),
        SapMachineJre(context),
        GraalVmJre(context),
        IbmJre(context),
        OracleJre(context),
        ZingJre(context),
    )
    return RuntimeRegistry(providers, default=DEFAULT_RUNTIME, log=log or context.log)


__all__ = [
    "DEFAULT_RUNTIME",
    "GraalVmJre",
    "HeapCalculator",
    "IbmJre",
    "JreProvider",
    "OpenJdkJre",
    "OracleJre",
    "SapMachineJre",
    "ZingJre",
    "ZuluJre",
    "count_classes",
    "estimate_loaded_classes",
    "major_version_of",
    "read_java_version",
    "standard_runtimes",
]
