# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared behaviour of Java runtime providers."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import ClassVar

from ..config import ProviderOverride, normalize_identifier
from ..constants import DEFAULT_JAVA_MAJOR_VERSION, JRE_DIRNAME
from ..errors import BuildpackError, InstallError, MissingPriorStateError, NonFatalToolingError
from ..models import DependencyDescriptor, DetectionOutcome
from ..options import OptionsAssembler
from ..providers.base import RuntimeProvider
from ..staging import Stager
from .jvmkill import JvmKillAgent
from .memory_calculator import HeapCalculator

LOGGER = logging.getLogger(__name__)

JRE_OPTIONS_PRIORITY = 5
JRE_OPTIONS_CONTRIBUTOR = "jre"
BASE_JAVA_OPTS = ("-Djava.io.tmpdir=$TMPDIR", "-XX:ActiveProcessorCount=$(nproc)")
COMPONENTS_KEY = "jres"

_RELEASE_VERSION = re.compile(r'^JAVA_VERSION="?([^"\s]+)"?', re.MULTILINE)


def read_java_version(java_home: Path) -> str | None:
    """Return ``JAVA_VERSION`` from the ``release`` file under ``java_home``."""

    try:
        content = (java_home / "release").read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    match = _RELEASE_VERSION.search(content)
    return match.group(1) if match else None


def major_version_of(version: str | None) -> int | None:
    """Return the Java major version of ``version`` (``1.8.0_422`` -> 8, ``17.0.13`` -> 17)."""

    if not version:
        return None
    segments = re.split(r"[._+-]", version)
    try:
        first = int(segments[0])
        if first == 1 and len(segments) > 1:
            return int(segments[1])
        return first
    except ValueError:
        return None


def locate_java_home(jre_dir: Path, prefixes: tuple[str, ...] = ("jdk", "jre")) -> Path | None:
    """Locate the directory holding ``bin/java`` under ``jre_dir``.

    Vendor-prefixed children are preferred over other children.
    """

    if (jre_dir / "bin" / "java").is_file():
        return jre_dir
    if not jre_dir.is_dir():
        return None
    children = sorted(child for child in jre_dir.iterdir() if child.is_dir())
    for prefixed in (True, False):
        for child in children:
            if prefixed and not child.name.startswith(prefixes):
                continue
            if (child / "bin" / "java").is_file():
                return child
    return None


def installed_java_major(stager: Stager) -> int:
    """Return the major version of the JRE installed in the dependency slot."""

    home = locate_java_home(stager.provider_dir(JRE_DIRNAME))
    version = read_java_version(home) if home else None
    return major_version_of(version) or DEFAULT_JAVA_MAJOR_VERSION


class JreProvider(RuntimeProvider):
    """Install a JRE into ``<slot>/jre`` and configure it.

    Subclasses only declare vendor metadata. Every value finalize needs is
    rediscovered from the installed tree, never carried over from supply.
    """

    display_name: ClassVar[str]
    dependency: ClassVar[str]
    config_key: ClassVar[str]
    home_prefixes: ClassVar[tuple[str, ...]] = ("jdk", "jre")

    @property
    def identifier(self) -> str:
        """Return the vendor name shown in build output."""

        return self.display_name

    @property
    def jre_dir(self) -> Path:
        """Return the slot directory the JRE is installed into."""

        return self.context.stager.provider_dir(JRE_DIRNAME)

    @property
    def java_home(self) -> Path | None:
        """Return the installed ``JAVA_HOME``, rediscovered from disk."""

        return self.find_java_home()

    @property
    def version(self) -> str | None:
        """Return the installed Java version read from the ``release`` file.

        Returns:
            str | None: Version such as ``17.0.13``, or ``None`` before supply.

        """

        home = self.find_java_home()
        return read_java_version(home) if home else None

    @property
    def major_version(self) -> int:
        """Return the installed Java major version, defaulting to 17 when unknown."""

        return major_version_of(self.version) or DEFAULT_JAVA_MAJOR_VERSION

    def aliases(self) -> frozenset[str]:
        """Return the identifiers that select this runtime in ``JBP_CONFIG_COMPONENTS``.

        Returns:
            frozenset[str]: Normalised short name and configuration key.

        """

        return frozenset({normalize_identifier(self.name), normalize_identifier(self.config_key)})

    def override(self) -> ProviderOverride:
        """Return the parsed ``JBP_CONFIG_<VENDOR>_JRE`` blob.

        Raises:
            ConfigurationError: If the blob is malformed.

        """

        return self.config.override(self.config_key)

    def is_explicit(self) -> bool:
        """Return whether configuration explicitly asks for this runtime.

        Returns:
            bool: ``True`` when the vendor override is set or the runtime is listed
            under ``jres`` in ``JBP_CONFIG_COMPONENTS``.

        """

        if self.config.has_override(self.config_key):
            return True
        return bool(self.aliases() & set(self.config.requested_components(COMPONENTS_KEY)))

    def detect(self) -> DetectionOutcome:
        """Match only when this runtime is explicitly configured.

        Returns:
            DetectionOutcome: A hit named after the vendor, otherwise a miss.

        Raises:
            ConfigurationError: If the vendor override cannot be parsed.

        """

        if not self.is_explicit():
            return self._miss()
        self.override()
        return self._hit(self.display_name)

    def version_constraint(self) -> str | None:
        """Return the requested version as a wildcard constraint.

        ``BP_JAVA_VERSION`` wins over the override ``version``; ``None`` means the
        catalog default.

        Returns:
            str | None: Normalised constraint such as ``17.*``.

        """

        versions = self.context.catalog.versions
        requested = self.config.java_version or self.override().version
        return versions.normalize(requested) if requested else None

    def resolve_dependency(self) -> DependencyDescriptor:
        """Return the catalog entry selected by configuration, or the catalog default.

        Raises:
            VersionNotFoundError: If the configured constraint matches nothing.
        """

        constraint = self.version_constraint()
        if constraint is None:
            return self.context.catalog.default_version(self.dependency)
        return self.context.catalog.find(self.dependency, constraint)

    def find_java_home(self) -> Path | None:
        """Return the directory holding ``bin/java`` under the JRE slot."""

        return locate_java_home(self.jre_dir, self.home_prefixes)

    def heap_calculator(self) -> HeapCalculator:
        """Return the memory calculator bound to this runtime's settings."""

        settings = self.override().section("memory_calculator")
        return HeapCalculator(self.context, self.jre_dir, self.major_version, settings)

    def jvmkill(self) -> JvmKillAgent:
        """Return the jvmkill agent installer for this runtime."""

        return JvmKillAgent(self.context, self.jre_dir)

    def supply(self) -> None:
        """Install the JRE, its ``profile.d`` script, jvmkill and the memory calculator.

        jvmkill and calculator failures are reported as warnings only.

        Raises:
            VersionNotFoundError: If the configured version is not in the catalog.
            InstallError: If the JRE cannot be installed or has no ``bin/java``.

        """

        self.log.begin_step("Installing %s", self.display_name)
        descriptor = self.resolve_dependency()
        self.log.info("Installing %s %s", self.display_name, descriptor.version)
        self.context.install(descriptor, self.jre_dir)
        java_home = self.find_java_home()
        if java_home is None:
            raise InstallError(f"{self.display_name}: no bin/java found under {self.jre_dir}")
        self._write_profile_d(java_home)
        self.log.info("Detected Java major version: %d", self.major_version)
        components = (
            ("JVMKill agent", self.jvmkill().supply),
            ("Memory Calculator", self.heap_calculator().supply),
        )
        for component, install in components:
            try:
                install()
            except (BuildpackError, OSError) as exc:
                self.log.warning("Failed to install %s: %s (continuing)", component, exc)

    def finalize(self) -> None:
        """Write the JRE option fragment from what supply installed.

        Raises:
            MissingPriorStateError: If no Java installation is present.

        """

        self.log.begin_step("Finalizing %s", self.display_name)
        java_home = self.find_java_home()
        if java_home is None:
            raise MissingPriorStateError(
                f"runtime '{self.name}' was not supplied: no Java installation under {self.jre_dir}"
            )
        options = list(BASE_JAVA_OPTS)
        agent_option = self.jvmkill().option()
        if agent_option:
            options.append(agent_option)
        OptionsAssembler(self.context.stager).contribute(JRE_OPTIONS_CONTRIBUTOR, JRE_OPTIONS_PRIORITY, *options)

    def release(self) -> str:
        """Return the memory sizing prefix of the start command.

        Returns:
            str: The calculator invocation, or an empty string when the
            calculator is not installed and heap sizing is skipped.
        """

        try:
            return self.heap_calculator().command()
        except NonFatalToolingError as exc:
            LOGGER.debug("skipping heap sizing: %s", exc)
            return ""

    def _write_profile_d(self, java_home: Path) -> None:
        """Export ``JAVA_HOME``, ``JRE_HOME`` and ``PATH`` for the runtime."""

        runtime_home = self.context.translator.translate(java_home)
        self.context.stager.write_profile_d(
            "java.sh",
            f"export JAVA_HOME={runtime_home}\nexport JRE_HOME={runtime_home}\nexport PATH=$JAVA_HOME/bin:$PATH\n",
        )


__all__ = [
    "BASE_JAVA_OPTS",
    "JRE_OPTIONS_PRIORITY",
    "JreProvider",
    "installed_java_major",
    "locate_java_home",
    "major_version_of",
    "read_java_version",
]
