# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""OpenTelemetry java agent."""

from __future__ import annotations

from .base import JavaAgent, system_property

OTEL_PREFIX = "otel."


class OpenTelemetryAgent(JavaAgent):
    """Every ``otel.*`` credential becomes a system property of the same name."""

    name = "opentelemetry"
    priority = 36
    config_key = "open_telemetry_javaagent"
    dependency = "open-telemetry-javaagent"
    install_dirname = "open_telemetry_javaagent"
    service_terms = ("otel-collector", "opentelemetry", "otel")
    jar_pattern = "opentelemetry-javaagent*.jar"
    display_name = "OpenTelemetry Javaagent"

    def options(self) -> list[str]:
        """Return the agent flag and the binding's ``otel.*`` properties.

        ``otel.service.name`` defaults to the application name.

        """

        options = [f"-javaagent:{self.agent_path()}"]
        binding = self.binding()
        credentials = binding.credentials if binding is not None else {}
        for key, value in sorted(credentials.items()):
            if key.startswith(OTEL_PREFIX):
                options.append(system_property(key, value))
        if "otel.service.name" not in credentials:
            options.append(system_property("otel.service.name", self.config.application_name or self.build_dir.name))
        return options


__all__ = ["OpenTelemetryAgent"]
