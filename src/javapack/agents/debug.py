# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JDWP remote debugging."""

from __future__ import annotations

from .base import PortAgent


class DebugAgent(PortAgent):
    """Open a JDWP socket when ``BPL_DEBUG_ENABLED`` is set."""

    name = "debug"
    priority = 20
    config_key = "debug"
    enabled_variable = "BPL_DEBUG_ENABLED"
    port_variable = "BPL_DEBUG_PORT"
    default_port = 8000

    def suspend(self) -> bool:
        """Return whether the JVM should wait for a debugger before starting."""

        return self.override().setting("suspend") is True

    def supply(self) -> None:
        """Report the debug port; nothing is installed."""

        suffix = ", suspended on start" if self.suspend() else ""
        self.log.begin_step("Debugging enabled on port %d%s", self.port(), suffix)

    def options(self) -> list[str]:
        """Return the JDWP ``-agentlib`` flag."""

        suspend = "y" if self.suspend() else "n"
        return [f"-agentlib:jdwp=transport=dt_socket,server=y,address={self.port()},suspend={suspend}"]


__all__ = ["DebugAgent"]
