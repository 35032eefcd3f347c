# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the bundled dependency catalog."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from javapack.catalog import DependencyCatalog, load_document
from javapack.errors import CatalogIntegrityError, CatalogValidationError, VersionNotFoundError
from javapack.models import DependencyDescriptor


def _entry(name: str, version: str, **extra: object) -> dict[str, object]:
    return {"name": name, "version": version, "uri": f"https://example.invalid/{name}-{version}.tar.gz", **extra}


def test_bundled_catalog_defaults(catalog: DependencyCatalog) -> None:
    assert catalog.default_version("openjdk").version == "17.0.13"
    assert catalog.default_version("tomcat").version.startswith("10.")
    assert "memory-calculator" in catalog.names()


def test_find_uses_highest_matching_version(catalog: DependencyCatalog) -> None:
    assert catalog.find("openjdk", "11.*").version == "11.0.25"
    with pytest.raises(VersionNotFoundError):
        catalog.find("openjdk", "99.*")


def test_stack_filter_drops_unsupported_entries() -> None:
    document = {
        "language": "java",
        "dependencies": [
            _entry("openjdk", "17.0.1", cf_stacks=["cflinuxfs4"]),
            _entry("openjdk", "17.0.2", cf_stacks=["cflinuxfs3"]),
            _entry("openjdk", "17.0.3"),
        ],
    }
    catalog = DependencyCatalog.from_document(document, stack="cflinuxfs4")
    assert catalog.all_versions("openjdk") == ["17.0.1", "17.0.3"]


def test_duplicate_entries_are_rejected() -> None:
    document = {"language": "java", "dependencies": [_entry("groovy", "4.0.1"), _entry("groovy", "4.0.1")]}
    with pytest.raises(CatalogIntegrityError, match="duplicate"):
        DependencyCatalog.from_document(document)


def test_schema_violation_is_reported() -> None:
    with pytest.raises(CatalogValidationError):
        DependencyCatalog.from_document({"language": "java", "dependencies": [{"name": "groovy"}]})


def test_default_without_declaration_is_highest() -> None:
    catalog = DependencyCatalog([
        DependencyDescriptor(name="jacoco", version="0.8.9", uri="https://example.invalid/a.zip"),
        DependencyDescriptor(name="jacoco", version="0.8.12", uri="https://example.invalid/b.zip"),
    ])
    assert catalog.default_version("jacoco").version == "0.8.12"
    with pytest.raises(VersionNotFoundError):
        catalog.default_version("missing")


def test_load_document_rejects_non_objects(tmp_path: Path) -> None:
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps([1, 2]), encoding="utf-8")
    with pytest.raises(CatalogIntegrityError):
        load_document(path)
    with pytest.raises(FileNotFoundError):
        load_document(tmp_path / "missing.json")


def test_descriptor_filename_and_stacks() -> None:
    descriptor = DependencyDescriptor(
        name="jvmkill",
        version="1.17.0",
        uri="https://example.invalid/jvmkill/jvmkill-1.17.0-RELEASE.so",
        stacks=("cflinuxfs4",),
    )
    assert descriptor.filename == "jvmkill-1.17.0-RELEASE.so"
    assert descriptor.supports(None)
    assert not descriptor.supports("cflinuxfs3")
