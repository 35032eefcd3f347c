# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Deferred JVM option fragments and the script that assembles them at launch."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .constants import JAVA_OPTS_SCRIPT_NAME
from .models import OptionFragment
from .paths import TranslationTarget
from .staging import Stager

LOGGER = logging.getLogger(__name__)

_FRAGMENT_NAME = re.compile(r"^(?P<priority>\d+)_(?P<contributor>[A-Za-z0-9_.-]+)\.opts$")
_CONTRIBUTOR = re.compile(r"^[A-Za-z0-9_.-]+$")

_SCRIPT_HEADER = """#!/bin/bash
# Assembles JAVA_OPTS from the option fragments written during staging.
# Fragments are listed in priority order; $JAVA_OPTS inside a fragment refers
# to the value the user supplied.

USER_JAVA_OPTS="$JAVA_OPTS"
JAVA_OPTS=""
"""

_SCRIPT_LOOP = r"""
for opts_file in {files}; do
    if [ -f "$opts_file" ]; then
        opts_content=$(cat "$opts_file")
        opts_content=$(printf '%s' "$opts_content" | sed 's|\$JAVA_OPTS|$USER_JAVA_OPTS|g')
        opts_content=$(eval "echo \"$opts_content\"")
        if [ -n "$opts_content" ]; then
            JAVA_OPTS="$JAVA_OPTS $opts_content"
        fi
    fi
done
"""

_SCRIPT_FOOTER = """
JAVA_OPTS=$(echo "$JAVA_OPTS" | sed -e 's/^[[:space:]]*//' -e 's/[[:space:]]*$//')
export JAVA_OPTS
"""


class OptionsAssembler:
    """Store option fragments in the dependency slot and assemble them.

    Each contributor owns exactly one ``NN_<contributor>.opts`` file which is
    overwritten on every write, so re-running finalize never duplicates flags.
    Fragments are ordered by numeric priority, then by filename.
    """

    def __init__(self, stager: Stager) -> None:
        """Bind the store to ``stager``'s dependency slot."""

        self._stager = stager

    @property
    def directory(self) -> Path:
        """Return the directory holding the option fragments.

        Returns:
            Path: ``java_opts`` directory of the dependency slot.

        """

        return self._stager.java_opts_dir

    def write(self, fragment: OptionFragment) -> Path:
        """Persist ``fragment``, replacing any previous content for its contributor.

        Raises:
            ValueError: If the priority is negative or the contributor name is unsafe.
        """

        if fragment.priority < 0:
            raise ValueError(f"priority must be non-negative, got {fragment.priority}")
        if not _CONTRIBUTOR.match(fragment.contributor):
            raise ValueError(f"invalid contributor name {fragment.contributor!r}")
        self.directory.mkdir(parents=True, exist_ok=True)
        for stale in self.directory.glob(f"*_{fragment.contributor}.opts"):
            previous = self._parse(stale)
            if stale.name != fragment.filename and previous and previous.contributor == fragment.contributor:
                stale.unlink()
        target = self.directory / fragment.filename
        target.write_text(fragment.content.strip(), encoding="utf-8")
        LOGGER.debug("wrote JAVA_OPTS fragment %s", target.name)
        return target

    def contribute(self, contributor: str, priority: int, *options: str) -> Path:
        """Write ``options`` as the fragment of ``contributor``.

        Args:
            contributor: Fragment owner, used in the file name.
            priority: Assembly position; lower values come first.
            *options: JVM options; empty strings are dropped.

        Returns:
            Path: The written fragment file.

        Raises:
            ValueError: If the priority is negative or the contributor name is unsafe.

        """

        content = " ".join(option for option in options if option)
        return self.write(OptionFragment(contributor=contributor, priority=priority, content=content))

    def fragments(self) -> list[OptionFragment]:
        """Return every stored fragment in assembly order."""

        if not self.directory.is_dir():
            return []
        found: list[tuple[int, str, OptionFragment]] = []
        for path in self.directory.iterdir():
            fragment = self._parse(path)
            if fragment is not None:
                found.append((fragment.priority, path.name, fragment))
        found.sort(key=lambda entry: (entry[0], entry[1]))
        return [fragment for _, _, fragment in found]

    def assembled_options(self) -> str:
        """Return the concatenated fragment content, before runtime expansion."""

        return " ".join(fragment.content for fragment in self.fragments() if fragment.content)

    def render_script(self) -> str:
        """Return the startup script that concatenates every fragment into ``JAVA_OPTS``.

        Returns:
            str: Shell script referencing fragments through ``$DEPS_DIR``.

        """

        translator = self._stager.translator
        files = [
            f'"{translator.translate(self.directory / fragment.filename, TranslationTarget.PORTABLE)}"'
            for fragment in self.fragments()
        ]
        body = _SCRIPT_LOOP.format(files=" ".join(files)) if files else ""
        return f"{_SCRIPT_HEADER}{body}{_SCRIPT_FOOTER}"

    def write_script(self) -> Path:
        """Write the ``profile.d`` script that exports the assembled ``JAVA_OPTS``."""

        return self._stager.write_profile_d(JAVA_OPTS_SCRIPT_NAME, self.render_script())

    @staticmethod
    def _parse(path: Path) -> OptionFragment | None:
        """Return the fragment stored at ``path``, or ``None`` for foreign files."""

        match = _FRAGMENT_NAME.match(path.name)
        if match is None or not path.is_file():
            return None
        return OptionFragment(
            contributor=match.group("contributor"),
            priority=int(match.group("priority")),
            content=path.read_text(encoding="utf-8").strip(),
        )


__all__ = ["OptionsAssembler"]
