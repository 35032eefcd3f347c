# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Data models shared by providers, the lifecycle and the catalog."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import AmbiguousMatchError


class DependencyDescriptor(BaseModel):
    """Immutable catalog entry describing one installable dependency."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    uri: str
    sha256: str | None = None
    stacks: tuple[str, ...] = ()

    @property
    def filename(self) -> str:
        """Return the last path segment of the download URI."""

        return self.uri.rstrip("/").rsplit("/", 1)[-1]

    def supports(self, stack: str | None) -> bool:
        """Return ``True`` when the dependency can run on ``stack``."""

        return stack is None or not self.stacks or stack in self.stacks


class Category(str, Enum):
    """Provider categories in registration order."""

    CONTAINER = "container"
    RUNTIME = "runtime"
    AGENT = "agent"


@dataclass(frozen=True, slots=True)
class DetectionOutcome:
    """Result of one provider's ``detect`` call."""

    provider: str
    matched: bool
    identifier: str | None = None
    ambiguity: AmbiguousMatchError | None = None

    @classmethod
    def miss(cls, provider: str) -> DetectionOutcome:
        """Return an outcome for a provider that did not match."""

        return cls(provider=provider, matched=False)

    @classmethod
    def hit(cls, provider: str, identifier: str | None = None) -> DetectionOutcome:
        """Return a match, identified by ``identifier`` or the provider name."""

        return cls(provider=provider, matched=True, identifier=identifier or provider)

    @classmethod
    def ambiguous(cls, provider: str, error: AmbiguousMatchError) -> DetectionOutcome:
        """Return a non-matching outcome carrying ``error``."""

        return cls(provider=provider, matched=False, ambiguity=error)


@dataclass(frozen=True, slots=True)
class HeapProfile:
    """Inputs handed to the memory calculator at process start."""

    loaded_class_estimate: int
    thread_budget: int
    headroom: int


@dataclass(frozen=True, slots=True)
class OptionFragment:
    """A priority ordered piece of JVM startup configuration."""

    contributor: str
    priority: int
    content: str

    @property
    def filename(self) -> str:
        """Return the ``NN_<contributor>.opts`` file name of the fragment."""

        return f"{self.priority:02d}_{self.contributor}.opts"


class SupplyRecord(BaseModel):
    """Marker persisted by supply and checked by finalize."""

    model_config = ConfigDict(validate_assignment=True)

    container: str
    container_identifier: str
    runtime: str
    runtime_identifier: str
    runtime_version: str | None = None
    java_home: str | None = None
    agents: list[str] = Field(default_factory=list)
    skipped_agents: list[str] = Field(default_factory=list)


class ReleaseDescriptor(BaseModel):
    """Final start command written once at the end of finalize."""

    model_config = ConfigDict(frozen=True)

    start_command: str
    memory_calculation_prefix: str = ""

    @property
    def web_command(self) -> str:
        """Return the start command behind the memory calculation prefix, if any."""

        if self.memory_calculation_prefix:
            return f"{self.memory_calculation_prefix} && {self.start_command}"
        return self.start_command

    def to_document(self) -> dict[str, Any]:
        """Return the release document with the ``web`` process type."""

        return {"default_process_types": {"web": self.web_command}}


__all__ = [
    "Category",
    "DependencyDescriptor",
    "DetectionOutcome",
    "HeapProfile",
    "OptionFragment",
    "ReleaseDescriptor",
    "SupplyRecord",
]
