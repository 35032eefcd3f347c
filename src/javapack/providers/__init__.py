# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Provider contract and the ordered registries built on it."""

from __future__ import annotations

from .base import (
    AgentProvider,
    ContainerProvider,
    Provider,
    ProviderContext,
    ReleasingProvider,
    RuntimeProvider,
)
from .registry import AgentRegistry, ContainerRegistry, ProviderRegistry, RuntimeRegistry

__all__ = [
    "AgentProvider",
    "AgentRegistry",
    "ContainerProvider",
    "ContainerRegistry",
    "Provider",
    "ProviderContext",
    "ProviderRegistry",
    "ReleasingProvider",
    "RuntimeProvider",
    "RuntimeRegistry",
]
