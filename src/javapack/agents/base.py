# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared behaviour of agent providers."""

from __future__ import annotations

import re
from abc import abstractmethod
from pathlib import Path
from typing import ClassVar

from ..config import ProviderOverride
from ..errors import InstallError, MissingPriorStateError
from ..models import DependencyDescriptor, DetectionOutcome
from ..options import OptionsAssembler
from ..providers.base import AgentProvider
from ..services import ServiceBinding

_SAFE_CHARACTER = re.compile(r"[A-Za-z0-9_\-.,:/@$\\]")
_VARIABLE_REFERENCE = re.compile(r"\$[({][^)}]+[)}]")


def escape_value(value: str) -> str:
    """Backslash-escape ``value`` for use inside ``JAVA_OPTS``.

    Newlines become a quoted newline; an empty value becomes ``''``.
    """

    if value == "":
        return "''"
    escaped: list[str] = []
    for character in value:
        if character == "\n":
            escaped.append("'\n'")
        elif _SAFE_CHARACTER.fullmatch(character):
            escaped.append(character)
        else:
            escaped.append(f"\\{character}")
    return "".join(escaped)


def escape_option(option: str) -> str:
    """Escape the value part of a ``key=value`` option, leaving the key untouched."""

    key, separator, value = option.partition("=")
    if not separator:
        return option
    return f"{key}={escape_value(value)}"


def system_property(name: str, value: object) -> str:
    """Format ``-Dname=value``; values referencing ``${VAR}``/``$(cmd)`` are quoted instead of escaped."""

    text = str(value)
    if _VARIABLE_REFERENCE.search(text):
        return f'-D{name}=\\"{text}\\"'
    return f"-D{name}={escape_value(text)}"


class ContributingAgent(AgentProvider):
    """Agent that only contributes one option fragment during finalize."""

    config_key: ClassVar[str]

    def override(self) -> ProviderOverride:
        """Return the parsed ``JBP_CONFIG_<KEY>`` blob of this agent.

        Raises:
            ConfigurationError: If the blob is malformed.

        """

        return self.config.override(self.config_key)

    @abstractmethod
    def options(self) -> list[str]:
        """Return the JVM options this agent contributes.

        Returns:
            list[str]: Options in the order they should appear in ``JAVA_OPTS``.

        """

        raise NotImplementedError

    @property
    def fragment_name(self) -> str:
        """Return the contributor name used for this agent's option fragment."""

        return self.name.replace("-", "_")

    def contribute(self, *options: str) -> Path:
        """Write ``options`` as this agent's fragment at its priority.

        Args:
            *options: JVM options to store.

        Returns:
            Path: The written fragment file.

        """

        return OptionsAssembler(self.context.stager).contribute(self.fragment_name, self.priority, *options)

    def finalize(self) -> None:
        """Write this agent's option fragment."""

        self.contribute(*self.options())


class PortAgent(ContributingAgent):
    """Agent switched on by ``BPL_*_ENABLED`` or ``JBP_CONFIG_<KEY>: {enabled: true}``.

    The ``BPL_*`` variables take precedence over the override blob.
    """

    enabled_variable: ClassVar[str]
    port_variable: ClassVar[str]
    default_port: ClassVar[int]

    def enabled(self) -> bool:
        """Return whether the agent is switched on.

        Returns:
            bool: The ``BPL_*_ENABLED`` flag when set, otherwise the override's
            ``enabled`` value.

        """

        flag = self.config.flag(self.enabled_variable)
        if flag is not None:
            return flag
        return self.override().enabled is True

    def port(self) -> int:
        """Return the listening port.

        Returns:
            int: The ``BPL_*_PORT`` value, the override ``port``, or the default,
            whichever is first positive.

        """

        port = self.config.integer(self.port_variable)
        if port is not None and port > 0:
            return port
        configured = self.override().setting("port")
        try:
            port = int(configured) if configured is not None else 0
        except (TypeError, ValueError):
            port = 0
        return port if port > 0 else self.default_port

    def detect(self) -> DetectionOutcome:
        """Match when the agent is enabled; the identifier carries the port."""

        if not self.enabled():
            return self._miss()
        return self._hit(f"{self.name}={self.port()}")


class JavaAgent(ContributingAgent):
    """Service-bound agent shipped as a ``-javaagent`` jar.

    Supply installs the catalog dependency into ``<slot>/<install_dirname>``;
    finalize finds the jar again on disk and contributes its options.
    """

    dependency: ClassVar[str]
    install_dirname: ClassVar[str]
    service_terms: ClassVar[tuple[str, ...]]
    jar_pattern: ClassVar[str] = "*.jar"
    display_name: ClassVar[str]

    @property
    def install_dir(self) -> Path:
        """Return the slot directory the agent is installed into."""

        return self.context.stager.provider_dir(self.install_dirname)

    def binding(self) -> ServiceBinding | None:
        """Return the first service binding matching this agent's terms.

        Returns:
            ServiceBinding | None: The binding, or ``None`` when unbound.

        """

        return self.config.services.find(*self.service_terms)

    def detect(self) -> DetectionOutcome:
        """Match when a service binding for this agent is present."""

        return self._hit(self.display_name) if self.binding() is not None else self._miss()

    def resolve_dependency(self) -> DependencyDescriptor:
        """Return the catalog entry to install.

        Returns:
            DependencyDescriptor: The override ``version`` match, or the catalog default.

        Raises:
            VersionNotFoundError: If the requested version is not in the catalog.

        """

        catalog = self.context.catalog
        requested = self.override().version
        if requested:
            return catalog.find(self.dependency, catalog.versions.normalize(requested))
        return catalog.default_version(self.dependency)

    def supply(self) -> None:
        """Install the agent and check that it ships a jar.

        Raises:
            VersionNotFoundError: If the requested version is not in the catalog.
            InstallError: If installation fails or yields no jar.

        """

        self.log.begin_step("Installing %s", self.display_name)
        descriptor = self.resolve_dependency()
        self.context.install(descriptor, self.install_dir)
        if self.agent_jar() is None:
            raise InstallError(f"{self.display_name}: no agent jar under {self.install_dir}")
        self.log.info("Installed %s version %s", self.display_name, descriptor.version)

    def agent_jar(self) -> Path | None:
        """Return the installed agent jar, or ``None`` when absent."""

        if not self.install_dir.is_dir():
            return None
        matches = sorted(path for path in self.install_dir.rglob(self.jar_pattern) if path.is_file())
        return matches[0] if matches else None

    def agent_path(self) -> str:
        """Return the runtime reference to the installed jar.

        Raises:
            MissingPriorStateError: If supply did not install the agent.
        """

        jar = self.agent_jar()
        if jar is None:
            raise MissingPriorStateError(f"{self.display_name} was not supplied: nothing under {self.install_dir}")
        return self.context.translator.translate(jar)

    def finalize(self) -> None:
        """Contribute the agent's options, announcing the step in the build log."""

        self.log.begin_step("Configuring %s", self.display_name)
        super().finalize()


__all__ = [
    "ContributingAgent",
    "JavaAgent",
    "PortAgent",
    "escape_option",
    "escape_value",
    "system_property",
]
