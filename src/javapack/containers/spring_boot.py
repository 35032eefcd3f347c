# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Spring Boot applications: exploded fat JARs, executable JARs and staged dists."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from ..models import DetectionOutcome
from ..providers.base import ContainerProvider
from ._layout import make_executable, root_files, start_scripts
from .manifest import JarManifest

BOOT_MARKERS = ("Start-Class", "Spring-Boot-Version", "Spring-Boot-Classes", "Spring-Boot-Lib")
LAUNCHER_V3 = "org.springframework.boot.loader.launch.JarLauncher"
LAUNCHER_V2 = "org.springframework.boot.loader.JarLauncher"
IDENTIFIER = "Spring Boot"


class BootLayout(str, Enum):
    """Ways a Spring Boot application can be laid out in the build directory."""

    EXPLODED = "exploded"
    EXECUTABLE_JAR = "executable-jar"
    STAGED = "staged"


def is_boot_manifest(manifest: JarManifest) -> bool:
    """Return ``True`` when ``manifest`` carries any Spring Boot attribute."""

    return any(marker in manifest for marker in BOOT_MARKERS)


def launcher_class(manifest: JarManifest) -> str:
    """Return the launcher ``java`` must start for a Spring Boot ``manifest``.

    A ``Main-Class`` naming a ``JarLauncher`` wins; otherwise the loader
    package follows ``Spring-Boot-Version`` (3.x moved it to ``launch``).
    Unknown versions get the 3.x launcher.
    """

    main_class = manifest.main_class
    if main_class and "JarLauncher" in main_class:
        return main_class
    version = manifest.get("Spring-Boot-Version")
    if version and not version.startswith("3."):
        return LAUNCHER_V2
    return LAUNCHER_V3


class SpringBootContainer(ContainerProvider):
    """Launch Spring Boot applications in whichever single layout they were pushed."""

    name = "spring-boot"

    @property
    def manifest(self) -> JarManifest:
        """Return the manifest of the exploded application, if any."""

        return JarManifest.from_directory(self.build_dir)

    def layouts(self) -> dict[BootLayout, str]:
        """Return every Spring Boot layout present, mapped to its detail."""

        found: dict[BootLayout, str] = {}
        manifest = self.manifest
        if (self.build_dir / "BOOT-INF").is_dir() and (is_boot_manifest(manifest) or manifest.main_class):
            found[BootLayout.EXPLODED] = "BOOT-INF"
        jar = self._executable_jar()
        if jar is not None:
            found[BootLayout.EXECUTABLE_JAR] = jar.name
        script = self._staged_script()
        if script is not None:
            found[BootLayout.STAGED] = script.name
        return found

    def detect(self) -> DetectionOutcome:
        """Claim the build directory when exactly one Spring Boot layout is present.

        Returns:
            DetectionOutcome: A hit, a miss, or an ambiguity naming every layout found.

        """

        layouts = self.layouts()
        if len(layouts) > 1:
            return self._ambiguous([f"{layout.value} ({detail})" for layout, detail in layouts.items()])
        if not layouts:
            return self._miss()
        self.log.debug("detected Spring Boot %s layout", next(iter(layouts)).value)
        return self._hit(IDENTIFIER)

    def supply(self) -> None:
        """Make the start scripts of a staged distribution executable."""

        self.log.begin_step("Supplying Spring Boot")
        if BootLayout.STAGED in self.layouts():
            make_executable(start_scripts(self.build_dir / "bin"))

    def release(self) -> str:
        """Return the start command for the detected layout.

        Exploded layouts win over staged distributions, which win over
        executable JARs.

        """

        layouts = self.layouts()
        if BootLayout.EXPLODED in layouts:
            manifest = self.manifest
            if is_boot_manifest(manifest):
                return f"eval exec $JAVA_HOME/bin/java $JAVA_OPTS -cp $HOME {launcher_class(manifest)}"
            return (
                "eval exec $JAVA_HOME/bin/java $JAVA_OPTS "
                f"-cp $HOME:$HOME/BOOT-INF/classes:$HOME/BOOT-INF/lib/* {manifest.main_class}"
            )
        if BootLayout.STAGED in layouts:
            return f"$HOME/bin/{layouts[BootLayout.STAGED]}"
        if BootLayout.EXECUTABLE_JAR in layouts:
            return f"eval exec $JAVA_HOME/bin/java $JAVA_OPTS -jar $HOME/{layouts[BootLayout.EXECUTABLE_JAR]}"
        return ""

    def _executable_jar(self) -> Path | None:
        """Return the first root JAR that looks like a Spring Boot fat JAR."""

        for jar in root_files(self.build_dir, ".jar"):
            lowered = jar.name.lower()
            if "spring" in lowered or "boot" in lowered or is_boot_manifest(JarManifest.from_archive(jar)):
                return jar
        return None

    def _staged_script(self) -> Path | None:
        """Return the start script of a ``dist``-staged Spring Boot application."""

        lib_dir = self.build_dir / "lib"
        if not any(jar.name.lower().startswith("spring-boot-") for jar in root_files(lib_dir, ".jar")):
            return None
        scripts = start_scripts(self.build_dir / "bin")
        return scripts[0] if scripts else None


__all__ = ["BootLayout", "SpringBootContainer", "is_boot_manifest", "launcher_class"]
