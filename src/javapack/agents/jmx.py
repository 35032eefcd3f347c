# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Local JMX connector, reachable through an SSH tunnel."""

from __future__ import annotations

from .base import PortAgent


class JmxAgent(PortAgent):
    """Expose JMX on a local port when ``BPL_JMX_ENABLED`` is set."""

    name = "jmx"
    priority = 29
    config_key = "jmx"
    enabled_variable = "BPL_JMX_ENABLED"
    port_variable = "BPL_JMX_PORT"
    default_port = 5000

    def supply(self) -> None:
        """Report the JMX port; nothing is installed."""

        self.log.begin_step("JMX enabled on port %d", self.port())

    def options(self) -> list[str]:
        """Return the remote JMX properties bound to the loopback address."""

        port = self.port()
        return [
            "-Djava.rmi.server.hostname=127.0.0.1",
            "-Dcom.sun.management.jmxremote.authenticate=false",
            "-Dcom.sun.management.jmxremote.ssl=false",
            f"-Dcom.sun.management.jmxremote.port={port}",
            f"-Dcom.sun.management.jmxremote.rmi.port={port}",
        ]


__all__ = ["JmxAgent"]
