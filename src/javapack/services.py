# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Service bindings parsed from ``VCAP_SERVICES``."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

LOGGER = logging.getLogger(__name__)


class ServiceBinding(BaseModel):
    """One bound service instance."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    label: str = ""
    tags: tuple[str, ...] = ()
    credentials: dict[str, Any] = Field(default_factory=dict)
    volume_mounts: tuple[dict[str, Any], ...] = ()

    @field_validator("name", "label", mode="before")
    @classmethod
    def _blank_text(cls, value: Any) -> Any:
        """Treat ``null`` names and labels as empty strings."""

        return "" if value is None else value

    @field_validator("tags", "volume_mounts", mode="before")
    @classmethod
    def _empty_sequence(cls, value: Any) -> Any:
        """Treat ``null`` tags and volume mounts as empty."""

        return () if value is None else value

    @field_validator("credentials", mode="before")
    @classmethod
    def _empty_credentials(cls, value: Any) -> Any:
        """Treat ``null`` credentials as empty."""

        return {} if value is None else value

    def has_tag(self, tag: str) -> bool:
        """Return whether ``tag`` is among the binding tags, ignoring case.

        Args:
            tag: Tag to look for.

        Returns:
            bool: ``True`` when the binding carries ``tag``.
        """

        return tag.lower() in (candidate.lower() for candidate in self.tags)

    def credential(self, *keys: str) -> Any:
        """Return the first credential present under any of ``keys``."""

        for key in keys:
            value = self.credentials.get(key)
            if value not in (None, ""):
                return value
        return None


class ServiceBindings(Sequence[ServiceBinding]):
    """Read-only view over every bound service, in declaration order."""

    def __init__(self, bindings: Sequence[ServiceBinding] = ()) -> None:
        """Store ``bindings`` in declaration order."""

        self._bindings = tuple(bindings)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ServiceBindings:
        """Build bindings from a decoded ``VCAP_SERVICES`` document.

        Instances that are not objects or do not validate are logged and skipped,
        so one malformed binding never hides the others.

        Args:
            payload: Mapping of service label to a list of instances.

        Returns:
            ServiceBindings: Every valid instance, in document order.
        """

        bindings: list[ServiceBinding] = []
        for label, instances in payload.items():
            if not isinstance(instances, list):
                LOGGER.warning("VCAP_SERVICES entry %r is not a list; ignoring it", label)
                continue
            for instance in instances:
                if not isinstance(instance, Mapping):
                    LOGGER.warning("VCAP_SERVICES entry %r holds a non-object instance; ignoring it", label)
                    continue
                document = {**instance, "label": instance.get("label") or label}
                try:
                    bindings.append(ServiceBinding.model_validate(document))
                except ValidationError as exc:
                    LOGGER.warning("ignoring invalid %r service binding: %s", label, exc.errors()[0]["msg"])
        return cls(bindings)

    def __len__(self) -> int:
        """Return the number of bound service instances.

        Returns:
            int: Count of valid bindings.
        """

        return len(self._bindings)

    def __iter__(self) -> Iterator[ServiceBinding]:
        """Iterate over bindings in declaration order.

        Returns:
            Iterator[ServiceBinding]: Iterator over every binding.
        """

        return iter(self._bindings)

    def __getitem__(self, index: int) -> ServiceBinding:  # type: ignore[override]
        """Return the binding at ``index``.

        Args:
            index: Position in declaration order.

        Returns:
            ServiceBinding: The binding stored at ``index``.
        """

        return self._bindings[index]

    def with_name_matching(self, pattern: str) -> ServiceBinding | None:
        """Return the first binding whose name matches ``pattern``.

        Args:
            pattern: Regular expression searched case-insensitively.

        Returns:
            ServiceBinding | None: Matching binding, or ``None``.
        """

        regex = re.compile(pattern, re.IGNORECASE)
        for binding in self._bindings:
            if regex.search(binding.name):
                return binding
        return None

    def find(self, *terms: str) -> ServiceBinding | None:
        """Return the first binding whose label, tags or name match any of ``terms``.

        Labels and tags are compared case-insensitively; names are searched with
        each term as a regular expression.
        """

        for term in terms:
            for binding in self._bindings:
                if binding.label.lower() == term.lower() or binding.has_tag(term):
                    return binding
        for term in terms:
            match = self.with_name_matching(term)
            if match is not None:
                return match
        return None


__all__ = ["ServiceBinding", "ServiceBindings"]
