# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""New Relic APM agent."""

from __future__ import annotations

from .base import JavaAgent


class NewRelicAgent(JavaAgent):
    """Attach the New Relic agent to a bound ``newrelic`` service."""

    name = "newrelic"
    priority = 35
    config_key = "new_relic_agent"
    dependency = "newrelic"
    install_dirname = "new_relic_agent"
    service_terms = ("newrelic",)
    jar_pattern = "newrelic*.jar"
    display_name = "New Relic Agent"

    def options(self) -> list[str]:
        """Return the agent flag plus the license key and application name.

        The application name falls back to the binding name.

        """

        options = [f"-javaagent:{self.agent_path()}"]
        binding = self.binding()
        if binding is None:
            return options
        license_key = binding.credential("licenseKey", "license_key")
        if license_key:
            options.append(f"-Dnewrelic.config.license_key={license_key}")
        app_name = self.config.application_name or binding.name
        if app_name:
            options.append(f"-Dnewrelic.config.app_name='{app_name}'")
        return options


__all__ = ["NewRelicAgent"]
