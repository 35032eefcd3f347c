# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Fixed dependency catalog loaded once per process."""

from __future__ import annotations

import json
from collections import defaultdict
from collections.abc import Iterable, Mapping
from importlib import resources
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError
from pydantic import ValidationError

from .errors import CatalogIntegrityError, CatalogValidationError, VersionNotFoundError
from .models import DependencyDescriptor
from .versioning import VersionResolver

_DATA_PACKAGE = "javapack.data"
MANIFEST_RESOURCE = "manifest.json"
SCHEMA_RESOURCE = "manifest.schema.json"


def load_document(path: Path) -> Mapping[str, Any]:
    """Load a JSON document from disk and ensure it is a JSON object.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        CatalogIntegrityError: If the document cannot be parsed or is not an object.
    """

    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as stream:
        try:
            payload = json.load(stream)
        except json.JSONDecodeError as exc:
            raise CatalogIntegrityError(f"{path}: failed to parse catalog JSON") from exc
    if not isinstance(payload, dict):
        raise CatalogIntegrityError(f"{path}: catalog must be a JSON object")
    return payload


def _bundled_text(name: str) -> str:
    """Return the text of a resource bundled in the data package."""

    return resources.files(_DATA_PACKAGE).joinpath(name).read_text(encoding="utf-8")


class DependencyCatalog:
    """Read-only catalog of installable dependencies.

    Entries are unique per ``(name, version)``. Lookups by constraint delegate to
    :class:`VersionResolver`.
    """

    def __init__(
        self,
        dependencies: Iterable[DependencyDescriptor],
        defaults: Mapping[str, str] | None = None,
        *,
        stack: str | None = None,
        versions: VersionResolver | None = None,
    ) -> None:
        """Index ``dependencies`` by name and version.

        Args:
            dependencies: Catalog entries; those not supporting ``stack`` are dropped.
            defaults: Default version per dependency name.
            stack: Stack the application is staged for.
            versions: Resolver used for constraint lookups.

        Raises:
            CatalogIntegrityError: If a name and version appear twice.

        """

        self._versions = versions or VersionResolver()
        self._defaults = dict(defaults or {})
        self._entries: dict[str, dict[str, DependencyDescriptor]] = defaultdict(dict)
        for descriptor in dependencies:
            if not descriptor.supports(stack):
                continue
            bucket = self._entries[descriptor.name]
            if descriptor.version in bucket:
                raise CatalogIntegrityError(
                    f"duplicate catalog entry for {descriptor.name} {descriptor.version}"
                )
            bucket[descriptor.version] = descriptor

    @classmethod
    def from_document(
        cls,
        document: Mapping[str, Any],
        *,
        stack: str | None = None,
        schema: Mapping[str, Any] | None = None,
        origin: str = "manifest",
    ) -> DependencyCatalog:
        """Validate ``document`` against the catalog schema and build a catalog.

        Raises:
            CatalogValidationError: When the document fails schema validation.
        """

        validator = Draft202012Validator(schema or json.loads(_bundled_text(SCHEMA_RESOURCE)))
        try:
            validator.validate(document)
        except JsonSchemaValidationError as exc:
            raise CatalogValidationError(f"{origin}: {exc.message}") from exc
        try:
            dependencies = [
                DependencyDescriptor(
                    name=entry["name"],
                    version=str(entry["version"]),
                    uri=entry["uri"],
                    sha256=entry.get("sha256"),
                    stacks=tuple(entry.get("cf_stacks", ())),
                )
                for entry in document.get("dependencies", ())
            ]
        except ValidationError as exc:
            raise CatalogValidationError(f"{origin}: {exc}") from exc
        defaults = {entry["name"]: str(entry["version"]) for entry in document.get("default_versions", ())}
        return cls(dependencies, defaults, stack=stack)

    @classmethod
    def from_path(cls, path: Path, *, stack: str | None = None) -> DependencyCatalog:
        """Load, validate and build a catalog from the file at ``path``."""

        return cls.from_document(load_document(path), stack=stack, origin=str(path))

    @classmethod
    def bundled(cls, *, stack: str | None = None) -> DependencyCatalog:
        """Return the catalog shipped with the package."""

        return cls.from_document(json.loads(_bundled_text(MANIFEST_RESOURCE)), stack=stack, origin=MANIFEST_RESOURCE)

    @property
    def versions(self) -> VersionResolver:
        """Return the resolver used for constraint lookups."""

        return self._versions

    def names(self) -> tuple[str, ...]:
        """Return every dependency name in sorted order."""

        return tuple(sorted(self._entries))

    def all_versions(self, name: str) -> list[str]:
        """Return the versions of ``name`` from lowest to highest."""

        return sorted(self._entries.get(name, {}), key=self._versions.sort_key)

    def find(self, name: str, constraint: str) -> DependencyDescriptor:
        """Return the highest entry for ``name`` matching ``constraint``.

        Raises:
            VersionNotFoundError: If no entry survives the constraint.
        """

        version = self._versions.resolve(name, constraint, self._entries.get(name, {}))
        return self._entries[name][version]

    def default_version(self, name: str) -> DependencyDescriptor:
        """Return the entry selected by the declared default constraint for ``name``.

        Names without a declared default resolve to their highest version.
        """

        constraint = self._defaults.get(name)
        if constraint is None:
            highest = self._versions.highest(self._entries.get(name, {}))
            if highest is None:
                raise VersionNotFoundError("default", name)
            return self._entries[name][highest]
        return self.find(name, constraint)


__all__ = ["DependencyCatalog", "load_document"]
