# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import zipfile
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from javapack.catalog import DependencyCatalog
from javapack.config import ConfigSnapshot
from javapack.console import get_console_manager
from javapack.errors import InstallError
from javapack.lifecycle import Lifecycle
from javapack.logging import BuildLog
from javapack.models import DependencyDescriptor
from javapack.providers.base import ProviderContext
from javapack.staging import Stager

JRE_DEPENDENCIES = frozenset({"openjdk", "zulu", "sapmachine", "graalvm", "ibm", "oracle", "zing"})


@dataclass
class FakeInstaller:
    """Installer that lays out a plausible tree for each dependency instead of downloading it."""

    installed: list[tuple[str, str, Path]] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)

    def install(self, descriptor: DependencyDescriptor, target_dir: Path) -> None:
        if descriptor.name in self.failing:
            raise InstallError(f"{descriptor.name} {descriptor.version}: simulated download failure")
        self.installed.append((descriptor.name, descriptor.version, target_dir))
        target_dir.mkdir(parents=True, exist_ok=True)
        name = descriptor.name
        if name in JRE_DEPENDENCIES:
            home = target_dir / f"jdk-{descriptor.version}"
            _touch(home / "bin" / "java", "#!/bin/sh\n")
            _touch(home / "release", f'JAVA_VERSION="{descriptor.version}"\n')
        elif name == "memory-calculator":
            _touch(target_dir / "java-buildpack-memory-calculator", "#!/bin/sh\n")
        elif name == "tomcat":
            _touch(target_dir / f"apache-tomcat-{descriptor.version}" / "bin" / "catalina.sh", "#!/bin/sh\n")
        elif name == "groovy":
            _touch(target_dir / f"groovy-{descriptor.version}" / "bin" / "groovy", "#!/bin/sh\n")
        elif name == "spring-boot-cli":
            _touch(target_dir / f"spring-{descriptor.version}" / "bin" / "spring", "#!/bin/sh\n")
        elif name == "jacoco":
            _touch(target_dir / "lib" / "jacocoagent.jar", "jar")
        else:
            _touch(target_dir / descriptor.filename, "binary")

    def names(self) -> list[str]:
        return [name for name, _version, _target in self.installed]


def _touch(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True)
def _reset_consoles() -> Iterable[None]:
    get_console_manager().reset()
    yield
    get_console_manager().reset()


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    path = tmp_path / "app"
    path.mkdir()
    return path


@pytest.fixture
def stager(tmp_path: Path, build_dir: Path) -> Stager:
    return Stager(build_dir=build_dir, cache_dir=tmp_path / "cache", deps_dir=tmp_path / "deps", deps_idx="0")


@pytest.fixture
def installer() -> FakeInstaller:
    return FakeInstaller()


@pytest.fixture
def catalog() -> DependencyCatalog:
    return DependencyCatalog.bundled()


@pytest.fixture
def make_context(
    stager: Stager, catalog: DependencyCatalog, installer: FakeInstaller
) -> Callable[..., ProviderContext]:
    """Return a factory building a provider context over the shared staging dirs."""

    def factory(environ: Mapping[str, str] | None = None) -> ProviderContext:
        return ProviderContext(
            stager=stager,
            catalog=catalog,
            installer=installer,
            config=ConfigSnapshot.from_environ(dict(environ or {})),
            log=BuildLog(use_color=False),
        )

    return factory


@pytest.fixture
def make_lifecycle(
    stager: Stager, catalog: DependencyCatalog, installer: FakeInstaller
) -> Callable[..., Lifecycle]:
    def factory(environ: Mapping[str, str] | None = None) -> Lifecycle:
        return Lifecycle.create(
            stager.build_dir,
            stager.cache_dir,
            stager.deps_dir,
            stager.deps_idx,
            environ=dict(environ or {}),
            catalog=catalog,
            installer=installer,
            log=BuildLog(use_color=False),
        )

    return factory


@pytest.fixture
def write_jar() -> Callable[..., Path]:
    """Return a helper writing a zip archive with an optional manifest and entries."""

    def factory(path: Path, manifest: str | None = None, entries: Iterable[str] = ()) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as archive:
            if manifest is not None:
                archive.writestr("META-INF/MANIFEST.MF", manifest)
            for entry in entries:
                archive.writestr(entry, b"")
        return path

    return factory
