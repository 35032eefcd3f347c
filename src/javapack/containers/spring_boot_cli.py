# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Groovy bean and POGO sources run through the Spring Boot CLI."""

from __future__ import annotations

from pathlib import Path

from ..errors import InstallError, MissingPriorStateError
from ..models import DetectionOutcome
from ..providers.base import ContainerProvider
from ._layout import locate_home, make_executable, relative
from .groovy_sources import GroovySource, find_groovy_sources

CLI_DIRNAME = "spring-boot-cli"
CLI_MARKER = "bin/spring"


def is_cli_application(sources: list[GroovySource]) -> bool:
    """Return whether ``sources`` only declare classes or bean configuration."""

    if not sources:
        return False
    return all(
        (source.is_pogo or source.is_beans) and not source.has_main_method and not source.has_shebang
        for source in sources
    )


class SpringBootCliContainer(ContainerProvider):
    """Run class-only Groovy sources with ``spring run`` from the Spring Boot CLI."""

    name = "spring-boot-cli"

    @property
    def install_dir(self) -> Path:
        """Return the directory the Spring Boot CLI is installed into."""

        return self.context.stager.provider_dir(CLI_DIRNAME)

    def sources(self) -> list[GroovySource]:
        """Return every Groovy source of the application."""

        return find_groovy_sources(self.build_dir)

    def detect(self) -> DetectionOutcome:
        """Claim Groovy applications made of classes and bean definitions only.

        Web applications with a ``WEB-INF`` tree are left to Tomcat.

        """

        if (self.build_dir / "WEB-INF").is_dir():
            return self._miss()
        if not is_cli_application(self.sources()):
            return self._miss()
        return self._hit("Spring Boot CLI")

    def supply(self) -> None:
        """Install the CLI and export its home and ``SERVER_PORT``.

        Raises:
            InstallError: If the installed tree has no ``bin/spring``.

        """

        self.log.begin_step("Supplying Spring Boot CLI")
        descriptor = self.context.catalog.default_version(CLI_DIRNAME)
        self.context.install(descriptor, self.install_dir)
        home = locate_home(self.install_dir, CLI_MARKER)
        if home is None:
            raise InstallError(f"Spring Boot CLI {descriptor.version}: {CLI_MARKER} not found")
        make_executable([home / CLI_MARKER])
        self.log.info("Installed Spring Boot CLI version %s", descriptor.version)
        self.context.stager.write_profile_d(
            "spring-boot-cli.sh",
            f"export SPRING_BOOT_CLI_HOME={self.context.translator.translate(home)}\nexport SERVER_PORT=$PORT\n",
        )

    def finalize(self) -> None:
        """Check that the CLI was installed during supply.

        Raises:
            MissingPriorStateError: If the CLI tree is absent.

        """

        if locate_home(self.install_dir, CLI_MARKER) is None:
            raise MissingPriorStateError(f"Spring Boot CLI was not supplied: nothing under {self.install_dir}")

    def release(self) -> str:
        """Return the ``spring run`` command over every Groovy source."""

        parts = ["$SPRING_BOOT_CLI_HOME/bin/spring", "run"]
        classpath = [
            pattern
            for directory, pattern in ((".additional_libs", ".additional_libs/*"), ("lib", "lib/*"))
            if (self.build_dir / directory).is_dir()
        ]
        if classpath:
            parts.extend(["--classpath", ":".join(classpath)])
        parts.extend(relative(source.path, self.build_dir) for source in self.sources())
        return " ".join(parts)


__all__ = ["SpringBootCliContainer", "is_cli_application"]
