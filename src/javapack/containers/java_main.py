# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Plain Java applications started through a main class."""

from __future__ import annotations

from pathlib import Path

from ..errors import ConfigurationError
from ..models import DetectionOutcome
from ..providers.base import ContainerProvider
from ._layout import relative, root_files
from .manifest import JarManifest

MAIN_CLASS_VARIABLE = "JAVA_MAIN_CLASS"
CONFIG_KEY = "java_main"
CLASSPATH_VARIABLE = "CLASSPATH"


class JavaMainContainer(ContainerProvider):
    """Launch applications that name a main class through config or their manifest."""

    name = "java-main"

    def executable_jar(self) -> Path | None:
        """Return the first root JAR whose manifest names a main class."""

        for jar in root_files(self.build_dir, ".jar"):
            if JarManifest.from_archive(jar).main_class:
                return jar
        return None

    def main_class(self) -> str | None:
        """Return the configured main class, falling back to ``META-INF/MANIFEST.MF``."""

        configured = self.config.get(MAIN_CLASS_VARIABLE) or self.config.override(CONFIG_KEY).setting(
            "java_main_class"
        )
        if configured:
            return str(configured)
        return JarManifest.from_directory(self.build_dir).main_class

    def detect(self) -> DetectionOutcome:
        """Claim applications with a main class, an executable JAR or root ``.class`` files."""

        if self.executable_jar() is not None or self.main_class() is not None:
            return self._hit("Java Main")
        if root_files(self.build_dir, ".class"):
            return self._hit("Java Main")
        return self._miss()

    def classpath(self) -> list[str]:
        """Return the runtime classpath: the application root, then root and ``lib/`` jars."""

        jars = root_files(self.build_dir, ".jar") + root_files(self.build_dir / "lib", ".jar")
        return ["$HOME", *(f"$HOME/{relative(jar, self.build_dir)}" for jar in jars)]

    def finalize(self) -> None:
        """Record the application classpath in ``env/CLASSPATH`` for later stages."""

        self.log.begin_step("Finalizing Java Main")
        self.context.stager.write_env_file(CLASSPATH_VARIABLE, ":".join(self.classpath()))

    def release(self) -> str:
        """Return the launch command.

        Raises:
            ConfigurationError: If only loose class files exist and no main class is configured.
        """

        main_class = self.main_class()
        jar = self.executable_jar()
        if jar is not None and not self.config.get(MAIN_CLASS_VARIABLE):
            return f"eval exec $JAVA_HOME/bin/java $JAVA_OPTS -jar $HOME/{jar.name}"
        if main_class is None:
            raise ConfigurationError(f"no main class found; set {MAIN_CLASS_VARIABLE}")
        return f"eval exec $JAVA_HOME/bin/java $JAVA_OPTS -cp {':'.join(self.classpath())} {main_class}"


__all__ = ["JavaMainContainer"]
