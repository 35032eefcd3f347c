# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JVMKill agent terminating the JVM on resource exhaustion."""

from __future__ import annotations

import shutil
import stat
from pathlib import Path

from ..constants import JVMKILL_PREFIX
from ..errors import InstallError
from ..paths import TranslationTarget
from ..providers.base import ProviderContext

JVMKILL_DEPENDENCY = "jvmkill"
HEAP_DUMP_TAG = "heap-dump"
HEAP_DUMP_FILENAME = "$CF_INSTANCE_INDEX-%FT%T%z-${CF_INSTANCE_GUID:0:8}.hprof"


class JvmKillAgent:
    """Install ``jvmkill-<version>.so`` next to the runtime and build its option."""

    def __init__(self, context: ProviderContext, jre_dir: Path) -> None:
        """Bind the agent to the runtime installed at ``jre_dir``.

        Args:
            context: Shared staging context.
            jre_dir: Directory the runtime was installed into.

        """

        self._context = context
        self._jre_dir = jre_dir

    @property
    def bin_dir(self) -> Path:
        """Return the runtime ``bin`` directory the library is copied into."""

        return self._jre_dir / "bin"

    def supply(self) -> Path:
        """Install the jvmkill library into the runtime ``bin`` directory.

        Earlier jvmkill libraries are removed first so only one remains.

        Returns:
            Path: The installed shared library.

        Raises:
            InstallError: If the downloaded artifact holds no shared library.

        """

        descriptor = self._context.catalog.default_version(JVMKILL_DEPENDENCY)
        scratch = self._context.stager.dep_dir / "tmp" / JVMKILL_DEPENDENCY
        shutil.rmtree(scratch, ignore_errors=True)
        self._context.install(descriptor, scratch)
        try:
            library = next((path for path in sorted(scratch.rglob("*.so")) if path.is_file()), None)
            if library is None:
                raise InstallError(f"no shared library found in {descriptor.filename}")
            self.bin_dir.mkdir(parents=True, exist_ok=True)
            for previous in self.bin_dir.glob(f"{JVMKILL_PREFIX}*.so"):
                previous.unlink()
            target = self.bin_dir / f"{JVMKILL_PREFIX}{descriptor.version}.so"
            shutil.copyfile(library, target)
            target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)
        return target

    def locate(self) -> Path | None:
        """Return the installed jvmkill library, or ``None``."""

        if not self.bin_dir.is_dir():
            return None
        candidates = sorted(self.bin_dir.glob(f"{JVMKILL_PREFIX}*.so"))
        return candidates[0] if candidates else None

    def heap_dump_path(self) -> str | None:
        """Return the heap dump location when a ``heap-dump`` volume service is bound."""

        for binding in self._context.config.services:
            if not binding.has_tag(HEAP_DUMP_TAG) or not binding.volume_mounts:
                continue
            container_dir = binding.volume_mounts[0].get("container_dir")
            if not isinstance(container_dir, str) or not container_dir:
                continue
            application = self._context.config.application
            parts = [
                container_dir.rstrip("/"),
                str(application.get("space_id", "")),
                str(application.get("application_id", "")),
                HEAP_DUMP_FILENAME,
            ]
            return "/".join(part for part in parts if part)
        return None

    def option(self) -> str | None:
        """Return the ``-agentpath`` flag, or ``None`` when the agent is not installed."""

        library = self.locate()
        if library is None:
            return None
        runtime_path = self._context.translator.translate(library, TranslationTarget.EARLY)
        arguments = "printHeapHistogram=1"
        dump_path = self.heap_dump_path()
        if dump_path:
            arguments = f"{arguments},heapDumpPath={dump_path}"
        return f"-agentpath:{runtime_path}={arguments}"


__all__ = ["HEAP_DUMP_TAG", "JVMKILL_DEPENDENCY", "JvmKillAgent"]
