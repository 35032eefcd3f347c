# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Applications packaged by the Gradle/sbt ``distZip`` tasks."""

from __future__ import annotations

import re
from pathlib import Path

from ..models import DetectionOutcome
from ..paths import TranslationTarget
from ..providers.base import ContainerProvider
from ._layout import APPLICATION_ROOT, make_executable, relative, start_scripts
from .play import play_jar_version

APP_CLASSPATH_PATTERN = re.compile(r'^declare -r app_classpath="(?P<classpath>.+)"$', re.MULTILINE)
CLASSPATH_PATTERN = re.compile(r"^CLASSPATH=(?P<classpath>.+)$", re.MULTILINE)


class DistZipContainer(ContainerProvider):
    """``bin/`` + ``lib/`` distributions that are not Play applications.

    Finalize prefixes the start script's classpath with jars installed into the
    dependency slot. The start script runs before ``$DEPS_DIR`` is exported, so
    those jars are referenced by their absolute runtime location.
    """

    name = "dist-zip"

    def start_script(self) -> Path | None:
        """Return the start script of a non-Play distribution.

        The build directory is checked before ``application-root``. A Play
        framework jar in ``lib`` rules the distribution out.

        Returns:
            Path | None: The first start script, or ``None`` when absent.

        """

        for root in (self.build_dir, self.build_dir / APPLICATION_ROOT):
            if not ((root / "bin").is_dir() and (root / "lib").is_dir()):
                continue
            if play_jar_version(root / "lib") is not None:
                return None
            scripts = start_scripts(root / "bin")
            if scripts:
                return scripts[0]
        return None

    def detect(self) -> DetectionOutcome:
        """Claim distributions that ship a ``bin`` start script beside ``lib``."""

        return self._hit("Dist ZIP") if self.start_script() is not None else self._miss()

    def supply(self) -> None:
        """Make the distribution start scripts executable."""

        self.log.begin_step("Supplying Dist ZIP")
        script = self.start_script()
        if script is not None:
            make_executable(start_scripts(script.parent))

    def finalize(self) -> None:
        """Export the distribution paths and add dependency jars to its classpath."""

        self.log.begin_step("Finalizing Dist ZIP")
        script = self.start_script()
        if script is None:
            return
        bin_dir = relative(script.parent, self.build_dir)
        self.context.stager.write_profile_d(
            "dist_zip.sh",
            "export DEPS_DIR=${DEPS_DIR:-/home/vcap/deps}\n"
            "export DIST_ZIP_HOME=$HOME\n"
            f"export DIST_ZIP_BIN=$HOME/{bin_dir}\n"
            "export PATH=$DIST_ZIP_BIN:$PATH\n",
        )
        if augment_classpath(script, self.additional_libraries()):
            self.log.info("Augmented %s classpath with dependency jars", script.name)

    def additional_libraries(self) -> list[str]:
        """Return runtime references to jars installed directly under slot sub-directories."""

        slot = self.context.stager.dep_dir
        if not slot.is_dir():
            return []
        translator = self.context.translator
        return [
            translator.translate(jar, TranslationTarget.EARLY)
            for jar in sorted(slot.glob("*/*.jar"))
            if jar.is_file()
        ]

    def release(self) -> str:
        """Return the start script under ``$HOME``."""

        script = self.start_script()
        return f"$HOME/{relative(script, self.build_dir)}" if script is not None else ""


def augment_classpath(script: Path, libraries: list[str]) -> bool:
    """Prefix the classpath assignment in ``script`` with ``libraries``.

    Only the first recognised form is rewritten. Libraries already present are
    not added again. Returns whether the script changed.
    """

    if not libraries:
        return False
    content = script.read_text(encoding="utf-8")
    for pattern, template in (
        (APP_CLASSPATH_PATTERN, 'declare -r app_classpath="{classpath}"'),
        (CLASSPATH_PATTERN, "CLASSPATH={classpath}"),
    ):
        match = pattern.search(content)
        if match is None:
            continue
        existing = match.group("classpath")
        missing = [library for library in libraries if library not in existing.split(":")]
        if not missing:
            return False
        line = template.format(classpath=":".join([*missing, existing]))
        content = content[: match.start()] + line + content[match.end() :]
        script.write_text(content, encoding="utf-8")
        make_executable([script])
        return True
    return False


__all__ = ["DistZipContainer", "augment_classpath"]
