# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration snapshot captured once per phase invocation."""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ConfigurationError
from .services import ServiceBindings

LOGGER = logging.getLogger(__name__)

OVERRIDE_PREFIX: Final[str] = "JBP_CONFIG_"
COMPONENTS_VARIABLE: Final[str] = "JBP_CONFIG_COMPONENTS"
JAVA_VERSION_VARIABLE: Final[str] = "BP_JAVA_VERSION"

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})
_IDENTIFIER_STRIP = re.compile(r"[^a-z0-9]")


def normalize_identifier(value: str) -> str:
    """Return a comparable form of a provider identifier.

    ``JavaBuildpack::Jre::ZuluJRE``, ``zulu_jre`` and ``Zulu-JRE`` all normalise
    to ``zulujre``.
    """

    tail = value.rsplit("::", 1)[-1]
    return _IDENTIFIER_STRIP.sub("", tail.lower())


class ProviderOverride(BaseModel):
    """Structured override blob supplied through ``JBP_CONFIG_<KEY>``."""

    model_config = ConfigDict(extra="allow", frozen=True)

    enabled: bool | None = None
    version: str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> str | None:
        """Keep YAML numbers such as ``17`` as version strings."""

        if value is None:
            return None
        return str(value)

    def setting(self, key: str, default: Any = None) -> Any:
        """Return an extra key of the override blob.

        Args:
            key: Key outside the ``enabled``/``version`` fields.
            default: Value returned when ``key`` is absent.

        Returns:
            Any: The configured value or ``default``.

        """

        return (self.model_extra or {}).get(key, default)

    def section(self, key: str) -> Mapping[str, Any]:
        """Return a nested mapping of the override blob, empty when absent or not a mapping."""

        value = self.setting(key)
        return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True, slots=True)
class ConfigSnapshot:
    """Immutable view of every configuration input the engine consumes.

    The snapshot is built once from an environment mapping and passed explicitly
    to each provider, so supply and finalize observe exactly the inputs they were
    started with.
    """

    environment: Mapping[str, str] = field(default_factory=dict)
    services: ServiceBindings = field(default_factory=ServiceBindings)
    application: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> ConfigSnapshot:
        """Capture the configuration inputs of one phase invocation.

        Args:
            environ: Environment mapping; defaults to ``os.environ``. It is copied,
                so later changes do not leak into the snapshot.

        Returns:
            ConfigSnapshot: Snapshot with parsed service bindings and application
            metadata. Malformed ``VCAP_*`` JSON is logged and treated as empty.

        """

        source = dict(os.environ if environ is None else environ)
        services_payload = _load_json_object(source, "VCAP_SERVICES")
        application = _load_json_object(source, "VCAP_APPLICATION")
        return cls(
            environment=MappingProxyType(source),
            services=ServiceBindings.from_payload(services_payload),
            application=MappingProxyType(application),
        )

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return the value of ``name``, treating blank values as unset.

        Args:
            name: Environment variable name.
            default: Value returned when ``name`` is unset or blank.

        Returns:
            str | None: The raw value or ``default``.

        """

        value = self.environment.get(name)
        if value is None or value.strip() == "":
            return default
        return value

    def flag(self, name: str) -> bool | None:
        """Return the boolean value of ``name`` or ``None`` when unset or unrecognised."""

        value = self.get(name)
        if value is None:
            return None
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        return None

    def integer(self, name: str) -> int | None:
        """Return ``name`` as an integer, or ``None`` when unset or not numeric."""

        value = self.get(name)
        if value is None:
            return None
        try:
            return int(value.strip())
        except ValueError:
            LOGGER.debug("ignoring non-integer value for %s: %r", name, value)
            return None

    @property
    def java_version(self) -> str | None:
        """Return the raw ``BP_JAVA_VERSION`` selector."""

        value = self.get(JAVA_VERSION_VARIABLE)
        return value.strip() if value else None

    @property
    def debug(self) -> bool:
        """Return whether ``BP_DEBUG`` asks for debug output."""

        return self.get("BP_DEBUG") is not None

    @property
    def application_name(self) -> str | None:
        """Return ``application_name`` from ``VCAP_APPLICATION``."""

        name = self.application.get("application_name")
        return name if isinstance(name, str) and name else None

    def override_variable(self, key: str) -> str:
        """Return the ``JBP_CONFIG_<KEY>`` variable name for ``key``."""

        return f"{OVERRIDE_PREFIX}{key.upper()}"

    def has_override(self, key: str) -> bool:
        """Return whether ``JBP_CONFIG_<KEY>`` is set for ``key``."""

        return self.get(self.override_variable(key)) is not None

    def override(self, key: str) -> ProviderOverride:
        """Return the parsed ``JBP_CONFIG_<KEY>`` blob, empty when unset.

        Raises:
            ConfigurationError: If the value is not a YAML mapping.
        """

        variable = self.override_variable(key)
        raw = self.get(variable)
        if raw is None:
            return ProviderOverride()
        payload = _load_yaml_mapping(variable, raw)
        try:
            return ProviderOverride.model_validate(payload)
        except ValidationError as exc:
            raise ConfigurationError(f"{variable}: {exc.errors()[0]['msg']}") from exc

    def requested_components(self, category: str) -> tuple[str, ...]:
        """Return normalised identifiers listed under ``category`` in ``JBP_CONFIG_COMPONENTS``."""

        raw = self.get(COMPONENTS_VARIABLE)
        if raw is None:
            return ()
        payload = _load_yaml_mapping(COMPONENTS_VARIABLE, raw)
        entries = payload.get(category) or ()
        if isinstance(entries, str):
            entries = [entries]
        if not isinstance(entries, list):
            raise ConfigurationError(f"{COMPONENTS_VARIABLE}: '{category}' must be a list")
        return tuple(normalize_identifier(str(entry)) for entry in entries)


def _load_yaml_mapping(variable: str, raw: str) -> dict[str, Any]:
    """Return ``raw`` parsed as a YAML mapping.

    Args:
        variable: Environment variable the value came from.
        raw: YAML text.

    Returns:
        dict[str, Any]: Parsed mapping, empty for a blank document.

    Raises:
        ConfigurationError: If ``raw`` is not valid YAML or not a mapping.

    """

    try:
        payload = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{variable}: invalid YAML ({exc})") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigurationError(f"{variable}: expected a mapping, got {type(payload).__name__}")
    return payload


def _load_json_object(environ: Mapping[str, str], variable: str) -> dict[str, Any]:
    """Return the JSON object in ``environ[variable]``, or ``{}`` when absent or invalid."""

    raw = environ.get(variable)
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        LOGGER.warning("%s is not valid JSON; ignoring it", variable)
        return {}
    if not isinstance(payload, dict):
        LOGGER.warning("%s is not a JSON object; ignoring it", variable)
        return {}
    return payload


__all__ = [
    "COMPONENTS_VARIABLE",
    "ConfigSnapshot",
    "JAVA_VERSION_VARIABLE",
    "OVERRIDE_PREFIX",
    "ProviderOverride",
    "normalize_identifier",
]
