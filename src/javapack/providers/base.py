# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Provider abstraction shared by containers, runtimes and agents."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from ..catalog import DependencyCatalog
from ..config import ConfigSnapshot
from ..errors import AmbiguousMatchError
from ..installer import DependencyInstaller
from ..logging import BuildLog
from ..models import Category, DependencyDescriptor, DetectionOutcome
from ..paths import PathTranslator
from ..staging import Stager


@dataclass(frozen=True, slots=True)
class ProviderContext:
    """Collaborators handed to every provider constructor."""

    stager: Stager
    catalog: DependencyCatalog
    installer: DependencyInstaller
    config: ConfigSnapshot
    log: BuildLog

    @property
    def build_dir(self) -> Path:
        """Return the application directory being staged."""

        return self.stager.build_dir

    @property
    def translator(self) -> PathTranslator:
        """Return the translator for paths inside the dependency slot."""

        return self.stager.translator

    def install(self, descriptor: DependencyDescriptor, target_dir: Path) -> None:
        """Install ``descriptor`` into ``target_dir`` through the installer collaborator.

        Args:
            descriptor: Catalog entry to install.
            target_dir: Directory receiving the extracted dependency.

        Raises:
            InstallError: If the installer cannot fetch or unpack the dependency.
        """

        self.log.debug("installing %s %s into %s", descriptor.name, descriptor.version, target_dir)
        self.installer.install(descriptor, target_dir)


class Provider(ABC):
    """Strategy object participating in detection, supply and finalize.

    ``detect`` must depend only on the application tree, the dependency slot and
    the configuration snapshot so that finalize can re-run it and reach the
    same answer supply did.
    """

    name: ClassVar[str]
    category: ClassVar[Category]

    def __init__(self, context: ProviderContext) -> None:
        """Bind the provider to the shared staging ``context``."""

        self._context = context

    @property
    def context(self) -> ProviderContext:
        """Return the collaborators this provider was built with."""

        return self._context

    @property
    def log(self) -> BuildLog:
        """Return the user-facing build log."""

        return self._context.log

    @property
    def config(self) -> ConfigSnapshot:
        """Return the configuration snapshot of the current phase."""

        return self._context.config

    @property
    def build_dir(self) -> Path:
        """Return the application directory being staged."""

        return self._context.build_dir

    @abstractmethod
    def detect(self) -> DetectionOutcome:
        """Decide whether this provider applies to the application.

        Returns:
            DetectionOutcome: Match flag, identifier and any ambiguity found.
        """

        raise NotImplementedError

    def supply(self) -> None:
        """Install whatever the provider needs at runtime."""

    def finalize(self) -> None:
        """Configure previously supplied artefacts."""

    def _miss(self) -> DetectionOutcome:
        return DetectionOutcome.miss(self.name)

    def _hit(self, identifier: str | None = None) -> DetectionOutcome:
        return DetectionOutcome.hit(self.name, identifier)

    def _ambiguous(self, candidates: Sequence[str]) -> DetectionOutcome:
        """Return an outcome carrying an ``AmbiguousMatchError`` for ``candidates``."""

        error = AmbiguousMatchError(self.category.value, self.name, candidates)
        return DetectionOutcome.ambiguous(self.name, error)


class ReleasingProvider(Provider):
    """Provider contributing to the final start command."""

    @abstractmethod
    def release(self) -> str:
        """Return this provider's part of the start command.

        Returns:
            str: Launch command for containers, memory sizing prefix for runtimes.

        """

        raise NotImplementedError


class ContainerProvider(ReleasingProvider):
    """Application shape; ``release`` returns the launch command."""

    category = Category.CONTAINER


class RuntimeProvider(ReleasingProvider):
    """Language runtime; ``release`` returns the memory-calculation prefix."""

    category = Category.RUNTIME

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Return the human readable runtime name."""

        raise NotImplementedError

    @property
    @abstractmethod
    def java_home(self) -> Path | None:
        """Return the installed ``JAVA_HOME``, or ``None`` before supply."""

        raise NotImplementedError

    @property
    @abstractmethod
    def version(self) -> str | None:
        """Return the installed runtime version, or ``None`` before supply."""

        raise NotImplementedError

    @property
    @abstractmethod
    def major_version(self) -> int:
        """Return the installed runtime's major version."""

        raise NotImplementedError


class AgentProvider(Provider):
    """Independently composable supporting agent."""

    category = Category.AGENT
    priority: ClassVar[int] = 50


__all__ = [
    "AgentProvider",
    "ContainerProvider",
    "Provider",
    "ProviderContext",
    "ReleasingProvider",
    "RuntimeProvider",
]
