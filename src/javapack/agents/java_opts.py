# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User supplied ``JAVA_OPTS`` from ``JBP_CONFIG_JAVA_OPTS``."""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

from ..errors import ConfigurationError
from ..models import DetectionOutcome
from .base import ContributingAgent, escape_option

JAVA_OPTS_REFERENCE = "$JAVA_OPTS"


@dataclass(frozen=True, slots=True)
class JavaOptsSettings:
    """Parsed ``JBP_CONFIG_JAVA_OPTS`` value."""

    from_environment: bool = True
    java_opts: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, raw: str | None) -> JavaOptsSettings:
        """Parse the override value.

        The value may be a mapping, a list of mappings merged in order, or a
        YAML string holding either. ``java_opts`` may be a list or a single
        shell-quoted string.

        Raises:
            ConfigurationError: If the YAML is malformed or a quote is unbalanced.
        """

        if raw is None:
            return cls()
        document = _load(raw)
        if isinstance(document, str):
            document = _load(document)
        if isinstance(document, list):
            merged: dict[str, Any] = {}
            for item in document:
                if isinstance(item, Mapping):
                    merged.update(item)
            document = merged
        if document is None:
            return cls()
        if not isinstance(document, Mapping):
            raise ConfigurationError(f"JBP_CONFIG_JAVA_OPTS: unexpected {type(document).__name__}")
        from_environment = document.get("from_environment", True)
        options = document.get("java_opts") or ()
        if isinstance(options, str):
            try:
                options = shlex.split(options)
            except ValueError as exc:
                raise ConfigurationError(f"JBP_CONFIG_JAVA_OPTS: {exc}") from exc
        return cls(
            from_environment=from_environment if isinstance(from_environment, bool) else True,
            java_opts=tuple(str(option) for option in options if isinstance(option, (str, int, float))),
        )


def _load(raw: str) -> Any:
    """Return ``raw`` parsed as YAML.

    Args:
        raw: YAML text from the override variable.

    Returns:
        Any: The parsed document.

    Raises:
        ConfigurationError: If ``raw`` is not valid YAML.

    """

    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"JBP_CONFIG_JAVA_OPTS: invalid YAML ({exc})") from exc


class JavaOptsAgent(ContributingAgent):
    """Always-on contributor placed last so that user flags win."""

    name = "java-opts"
    priority = 99
    config_key = "java_opts"

    @property
    def fragment_name(self) -> str:
        """Return the fragment name, kept apart from agent fragments."""

        return "user_java_opts"

    def settings(self) -> JavaOptsSettings:
        """Return the parsed ``JBP_CONFIG_JAVA_OPTS`` settings."""

        return JavaOptsSettings.parse(self.config.get(self.config.override_variable(self.config_key)))

    def detect(self) -> DetectionOutcome:
        """Contribute unless the override disables both static and environment options."""

        settings = self.settings()
        if settings.java_opts or settings.from_environment:
            return self._hit("Java Opts")
        return self._miss()

    def options(self) -> list[str]:
        """Return the configured flags, then ``$JAVA_OPTS`` when environment options are on."""

        settings = self.settings()
        options = [escape_option(option) for option in settings.java_opts]
        if settings.from_environment:
            options.append(JAVA_OPTS_REFERENCE)
        return options

    def finalize(self) -> None:
        """Write the user options fragment."""

        self.log.begin_step("Configuring Java Opts")
        super().finalize()


__all__ = ["JavaOptsAgent", "JavaOptsSettings"]
