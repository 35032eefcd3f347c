# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Servlet applications served by Apache Tomcat."""

from __future__ import annotations

from pathlib import Path

from ..errors import InstallError, MissingPriorStateError, VersionNotFoundError
from ..models import DependencyDescriptor, DetectionOutcome
from ..providers.base import ContainerProvider
from ..runtimes.base import installed_java_major
from ._layout import locate_home, make_executable, root_files

TOMCAT_DIRNAME = "tomcat"
CATALINA_MARKER = "bin/catalina.sh"
CONFIG_KEY = "tomcat"

ROOT_CONTEXT = """<?xml version="1.0" encoding="UTF-8"?>
<Context docBase="${user.home}/app" reloadable="false">
</Context>
"""


def tomcat_line_for(java_major: int) -> str:
    """Return the Tomcat version pattern compatible with ``java_major``."""

    return "10.*" if java_major >= 11 else "9.*"


class TomcatContainer(ContainerProvider):
    """Serve a ``WEB-INF`` tree or WAR archive with a catalog Tomcat."""

    name = "tomcat"

    @property
    def install_dir(self) -> Path:
        """Return the slot directory Tomcat is installed into."""

        return self.context.stager.provider_dir(TOMCAT_DIRNAME)

    def catalina_home(self) -> Path | None:
        """Return the installed ``CATALINA_HOME``, or ``None`` when absent."""

        return locate_home(self.install_dir, CATALINA_MARKER)

    def detect(self) -> DetectionOutcome:
        """Match a ``WEB-INF`` directory or a root ``*.war`` archive."""

        if (self.build_dir / "WEB-INF").is_dir():
            return self._hit("Tomcat")
        wars = root_files(self.build_dir, ".war")
        if wars:
            self.log.debug("detected WAR file %s", wars[0].name)
            return self._hit("Tomcat")
        return self._miss()

    def resolve_dependency(self) -> DependencyDescriptor:
        """Return the Tomcat release to install.

        An override ``version`` wins. Otherwise the line follows the installed Java
        major version: 10.x from Java 11, 9.x before.

        Returns:
            DependencyDescriptor: Catalog entry to install.

        Raises:
            VersionNotFoundError: If an explicitly requested version is not in the catalog.

        """

        catalog = self.context.catalog
        requested = self.config.override(CONFIG_KEY).version
        if requested:
            return catalog.find(TOMCAT_DIRNAME, catalog.versions.normalize(requested))
        java_major = installed_java_major(self.context.stager)
        pattern = tomcat_line_for(java_major)
        try:
            descriptor = catalog.find(TOMCAT_DIRNAME, pattern)
        except VersionNotFoundError as exc:
            self.log.warning("Unable to resolve Tomcat %s: %s", pattern, exc)
            return catalog.default_version(TOMCAT_DIRNAME)
        self.log.info("Using Tomcat %s for Java %d", pattern.rstrip(".*") + ".x", java_major)
        return descriptor

    def access_logging_enabled(self) -> bool:
        """Return whether ``access_logging_support`` switches access logging on."""

        support = self.config.override(CONFIG_KEY).section("access_logging_support")
        value = support.get("access_logging")
        return value is True or str(value).lower() in {"enabled", "true"}

    def supply(self) -> None:
        """Install Tomcat and write ``profile.d/tomcat.sh``.

        Raises:
            InstallError: If the installed tree has no ``bin/catalina.sh``.

        """

        self.log.begin_step("Supplying Tomcat")
        descriptor = self.resolve_dependency()
        self.context.install(descriptor, self.install_dir)
        home = self.catalina_home()
        if home is None:
            raise InstallError(f"Tomcat {descriptor.version}: {CATALINA_MARKER} not found under {self.install_dir}")
        make_executable(sorted((home / "bin").glob("*.sh")))
        self.log.info("Installed Tomcat version %s", descriptor.version)
        runtime_home = self.context.translator.translate(home)
        access_logging = "true" if self.access_logging_enabled() else "false"
        self.context.stager.write_profile_d(
            "tomcat.sh",
            f"export CATALINA_HOME={runtime_home}\n"
            f"export CATALINA_BASE={runtime_home}\n"
            'export JAVA_OPTS="${JAVA_OPTS:+$JAVA_OPTS }-Dhttp.port=$PORT '
            f'-Daccess.logging.enabled={access_logging}"\n',
        )

    def finalize(self) -> None:
        """Point the root web context at the exploded application.

        Raises:
            MissingPriorStateError: If Tomcat was not supplied.

        """

        self.log.begin_step("Finalizing Tomcat")
        home = self.catalina_home()
        if home is None:
            raise MissingPriorStateError(f"Tomcat was not supplied: nothing under {self.install_dir}")
        if not (self.build_dir / "WEB-INF").is_dir():
            return
        context_dir = home / "conf" / "Catalina" / "localhost"
        context_dir.mkdir(parents=True, exist_ok=True)
        (context_dir / "ROOT.xml").write_text(ROOT_CONTEXT, encoding="utf-8")
        self.log.info("Tomcat configured to serve the application from $HOME")

    def release(self) -> str:
        """Return the ``catalina.sh run`` command."""

        return "$CATALINA_HOME/bin/catalina.sh run"


__all__ = ["TomcatContainer", "tomcat_line_for"]
