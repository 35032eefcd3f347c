# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Groovy scripts run with the Groovy distribution."""

from __future__ import annotations

from pathlib import Path

from ..errors import InstallError, MissingPriorStateError
from ..models import DetectionOutcome
from ..providers.base import ContainerProvider
from ._layout import locate_home, make_executable, relative, root_files
from .groovy_sources import find_groovy_sources

GROOVY_DIRNAME = "groovy"
GROOVY_MARKER = "bin/groovy"
SCRIPT_VARIABLE = "GROOVY_SCRIPT"


class GroovyContainer(ContainerProvider):
    """Run a single root Groovy script with a catalog Groovy distribution."""

    name = "groovy"

    @property
    def install_dir(self) -> Path:
        """Return the directory the Groovy distribution is installed into."""

        return self.context.stager.provider_dir(GROOVY_DIRNAME)

    def candidate_scripts(self) -> list[Path]:
        """Return root ``.groovy`` files that ``groovy`` can run directly."""

        sources = find_groovy_sources(self.build_dir, recursive=False)
        return [source.path for source in sources if source.is_script]

    def main_script(self) -> Path | None:
        """Return the script ``groovy`` should run.

        ``GROOVY_SCRIPT`` names the script explicitly. Without it the single
        runnable root script is used.

        Returns:
            Path | None: The script, or ``None`` when it is missing or not unique.

        """

        requested = self.config.get(SCRIPT_VARIABLE)
        if requested:
            path = self.build_dir / requested
            return path if path.is_file() else None
        candidates = self.candidate_scripts()
        return candidates[0] if len(candidates) == 1 else None

    def detect(self) -> DetectionOutcome:
        """Claim the build directory when one Groovy script can be run.

        Returns:
            DetectionOutcome: A hit, a miss, or an ambiguity listing every
            candidate script.

        """

        if self.config.get(SCRIPT_VARIABLE):
            if self.main_script() is None:
                self.log.debug("%s names a missing file", SCRIPT_VARIABLE)
                return self._miss()
            return self._hit("Groovy")
        candidates = self.candidate_scripts()
        if len(candidates) > 1:
            return self._ambiguous([relative(path, self.build_dir) for path in candidates])
        if not candidates:
            return self._miss()
        return self._hit("Groovy")

    def supply(self) -> None:
        """Install Groovy and export ``GROOVY_HOME`` from a profile script.

        Raises:
            InstallError: If the installed tree has no ``bin/groovy``.

        """

        self.log.begin_step("Supplying Groovy")
        descriptor = self.context.catalog.default_version(GROOVY_DIRNAME)
        self.context.install(descriptor, self.install_dir)
        home = locate_home(self.install_dir, GROOVY_MARKER)
        if home is None:
            raise InstallError(f"Groovy {descriptor.version}: {GROOVY_MARKER} not found under {self.install_dir}")
        make_executable([home / GROOVY_MARKER])
        self.log.info("Installed Groovy version %s", descriptor.version)
        self.context.stager.write_profile_d(
            "groovy.sh", f"export GROOVY_HOME={self.context.translator.translate(home)}\n"
        )

    def finalize(self) -> None:
        """Check that Groovy was installed during supply.

        Raises:
            MissingPriorStateError: If the Groovy tree is absent.

        """

        if locate_home(self.install_dir, GROOVY_MARKER) is None:
            raise MissingPriorStateError(f"Groovy was not supplied: nothing under {self.install_dir}")

    def classpath(self) -> list[str]:
        """Return the root and ``lib`` JARs relative to the build directory."""

        jars = root_files(self.build_dir, ".jar") + root_files(self.build_dir / "lib", ".jar")
        return [relative(jar, self.build_dir) for jar in jars]

    def release(self) -> str:
        """Return the ``groovy`` command running the main script."""

        script = self.main_script()
        if script is None:
            return ""
        parts = ["$GROOVY_HOME/bin/groovy", "$JAVA_OPTS"]
        classpath = self.classpath()
        if classpath:
            parts.extend(["-cp", ":".join(classpath)])
        parts.append(relative(script, self.build_dir))
        return " ".join(parts)


__all__ = ["GroovyContainer"]
