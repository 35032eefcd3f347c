# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Stage Java applications for a container platform in supply and finalize phases."""

from __future__ import annotations

from .catalog import DependencyCatalog
from .config import ConfigSnapshot
from .detect import detect_application
from .errors import (
    AmbiguousMatchError,
    BuildpackError,
    ConfigurationError,
    InstallError,
    MissingPriorStateError,
    NoMatchError,
    NonFatalToolingError,
    VersionNotFoundError,
)
from .lifecycle import Lifecycle, Phase, read_release
from .models import ReleaseDescriptor, SupplyRecord
from .staging import Stager

__version__ = "0.1.0"

__all__ = [
    "AmbiguousMatchError",
    "BuildpackError",
    "ConfigSnapshot",
    "ConfigurationError",
    "DependencyCatalog",
    "InstallError",
    "Lifecycle",
    "MissingPriorStateError",
    "NoMatchError",
    "NonFatalToolingError",
    "Phase",
    "ReleaseDescriptor",
    "Stager",
    "SupplyRecord",
    "VersionNotFoundError",
    "__version__",
    "detect_application",
    "read_release",
]
