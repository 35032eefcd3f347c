# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Ordered provider registries with per-category selection rules."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import ClassVar, Generic, TypeVar

from ..errors import BuildpackError, ConfigurationError, NoMatchError
from ..logging import BuildLog
from ..models import Category, DetectionOutcome
from .base import AgentProvider, ContainerProvider, Provider, RuntimeProvider

LOGGER = logging.getLogger(__name__)

ProviderT = TypeVar("ProviderT", bound=Provider)

# Failures an individual agent may raise without affecting the rest of the build.
AGENT_ERRORS: tuple[type[Exception], ...] = (BuildpackError, OSError, ValueError)


class ProviderRegistry(Mapping[str, ProviderT], Generic[ProviderT]):
    """Read-only mapping of provider names to providers, in registration order.

    Registration order is the detection order. Callers must register the same
    providers in the same order in every phase.
    """

    category: ClassVar[Category]

    def __init__(self, providers: Iterable[ProviderT] = (), *, log: BuildLog | None = None) -> None:
        """Register ``providers`` in order.

        Args:
            providers: Providers to register.
            log: Build log receiving warnings; the module logger is used without it.

        """

        self._providers: dict[str, ProviderT] = {}
        self._log = log
        for provider in providers:
            self.register(provider)

    def register(self, provider: ProviderT) -> None:
        """Append ``provider`` to the registry.

        Raises:
            ValueError: If a provider with the same name is already registered.
        """

        if provider.name in self._providers:
            raise ValueError(f"{self.category.value} provider '{provider.name}' already registered")
        self._providers[provider.name] = provider

    def providers(self) -> tuple[ProviderT, ...]:
        """Return the registered providers in detection order.

        Returns:
            tuple[ProviderT, ...]: Providers in registration order.
        """

        return tuple(self._providers.values())

    def detect_each(self) -> Iterator[tuple[ProviderT, DetectionOutcome]]:
        """Run detection on every provider in order.

        Yields:
            tuple[ProviderT, DetectionOutcome]: Each provider with its outcome.
        """

        for provider in self._providers.values():
            yield provider, provider.detect()

    def __len__(self) -> int:
        """Return the number of registered providers.

        Returns:
            int: Provider count.
        """

        return len(self._providers)

    def __iter__(self) -> Iterator[str]:
        """Iterate over provider names in registration order.

        Returns:
            Iterator[str]: Iterator over provider names.
        """

        return iter(self._providers)

    def __getitem__(self, name: str) -> ProviderT:
        """Return the provider registered as ``name``.

        Args:
            name: Provider name.

        Returns:
            ProviderT: The registered provider.

        Raises:
            KeyError: If no provider uses ``name``.
        """

        return self._providers[name]

    def _warn(self, message: str, *args: object) -> None:
        """Send a warning to the build log, or the module logger without one."""

        if self._log is not None:
            self._log.warning(message, *args)
        else:
            LOGGER.warning(message, *args)


class ContainerRegistry(ProviderRegistry[ContainerProvider]):
    """First-match registry; ambiguity aborts detection."""

    category = Category.CONTAINER

    def select(self) -> tuple[ContainerProvider, DetectionOutcome]:
        """Return the first matching container.

        Raises:
            AmbiguousMatchError: If a provider reports conflicting layouts.
            NoMatchError: If no container matches.
        """

        for provider, outcome in self.detect_each():
            if outcome.ambiguity is not None:
                raise outcome.ambiguity
            if outcome.matched:
                LOGGER.debug("container %s matched as %s", provider.name, outcome.identifier)
                return provider, outcome
        raise NoMatchError(self.category.value, f"tried {', '.join(self)}")


class RuntimeRegistry(ProviderRegistry[RuntimeProvider]):
    """Exactly-one registry with an always-matching default."""

    category = Category.RUNTIME

    def __init__(
        self,
        providers: Iterable[RuntimeProvider] = (),
        *,
        default: str,
        log: BuildLog | None = None,
    ) -> None:
        """Register ``providers`` and remember the fallback runtime.

        Args:
            providers: Runtime providers to register.
            default: Name of the runtime chosen when no other one is explicit.
            log: Build log receiving warnings.

        """

        super().__init__(providers, log=log)
        if default not in self:
            raise ValueError(f"default runtime '{default}' is not registered")
        self._default = default

    @property
    def default(self) -> RuntimeProvider:
        """Return the runtime used when none is explicitly configured."""

        return self[self._default]

    def select(self) -> tuple[RuntimeProvider, DetectionOutcome]:
        """Return the explicitly configured runtime, or the default.

        Raises:
            AmbiguousMatchError: If a runtime reports conflicting layouts.
            ConfigurationError: If detection failed or several runtimes are explicitly configured.
        """

        explicit: list[tuple[RuntimeProvider, DetectionOutcome]] = []
        failures: list[str] = []
        for provider in self.providers():
            try:
                outcome = provider.detect()
            except BuildpackError as exc:
                failures.append(f"{provider.name}: {exc}")
                continue
            if outcome.ambiguity is not None:
                raise outcome.ambiguity
            if outcome.matched:
                explicit.append((provider, outcome))
        if failures:
            raise ConfigurationError(f"runtime detection failed: {'; '.join(failures)}")
        if len(explicit) > 1:
            names = ", ".join(provider.name for provider, _ in explicit)
            raise ConfigurationError(f"several runtimes are explicitly configured: {names}")
        if explicit:
            return explicit[0]
        default = self.default
        return default, DetectionOutcome.hit(default.name, default.identifier)


class AgentRegistry(ProviderRegistry[AgentProvider]):
    """All-match registry isolating failures per agent."""

    category = Category.AGENT

    def select_all(self) -> list[tuple[AgentProvider, DetectionOutcome]]:
        """Return every matching agent; detection failures skip only that agent."""

        matched: list[tuple[AgentProvider, DetectionOutcome]] = []
        for provider in self.providers():
            try:
                outcome = provider.detect()
            except AGENT_ERRORS as exc:
                self._warn("Skipping agent %s: detection failed: %s", provider.name, exc)
                continue
            if outcome.ambiguity is not None:
                self._warn("Skipping agent %s: %s", provider.name, outcome.ambiguity)
                continue
            if outcome.matched:
                matched.append((provider, outcome))
        return matched

    def supply_each(self, agents: Iterable[AgentProvider]) -> list[AgentProvider]:
        """Supply ``agents`` in order and return the ones that succeeded."""

        return self._run_each(agents, "supply", lambda agent: agent.supply())

    def finalize_each(self, agents: Iterable[AgentProvider]) -> list[AgentProvider]:
        """Finalize ``agents`` in order and return the ones that succeeded."""

        return self._run_each(agents, "finalize", lambda agent: agent.finalize())

    def _run_each(
        self,
        agents: Iterable[AgentProvider],
        phase: str,
        action: Callable[[AgentProvider], None],
    ) -> list[AgentProvider]:
        """Run ``action`` on each agent, skipping the ones that fail.

        Args:
            agents: Agents to run.
            phase: Phase name used in the warning.
            action: Callable performing the phase on one agent.

        Returns:
            list[AgentProvider]: Agents whose ``action`` completed.

        """

        succeeded: list[AgentProvider] = []
        for agent in agents:
            try:
                action(agent)
            except AGENT_ERRORS as exc:
                self._warn("Skipping agent %s: %s failed: %s", agent.name, phase, exc)
                continue
            succeeded.append(agent)
        return succeeded


__all__ = [
    "AGENT_ERRORS",
    "AgentRegistry",
    "ContainerRegistry",
    "ProviderRegistry",
    "RuntimeRegistry",
]
