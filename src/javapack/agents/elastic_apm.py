# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Elastic APM java agent."""

from __future__ import annotations

from ..models import DetectionOutcome
from ..services import ServiceBinding
from .base import JavaAgent, system_property


def has_required_credentials(binding: ServiceBinding) -> bool:
    """Return whether ``binding`` names a server and carries a secret token."""

    credentials = binding.credentials
    return ("server_url" in credentials or "server_urls" in credentials) and "secret_token" in credentials


class ElasticApmAgent(JavaAgent):
    """Attach Elastic APM when a binding supplies a server URL and secret token."""

    name = "elastic-apm"
    priority = 20
    config_key = "elastic_apm_agent"
    dependency = "elastic-apm-agent"
    install_dirname = "elastic_apm_agent"
    service_terms = ("elastic-apm", "elastic")
    jar_pattern = "elastic-apm-agent*.jar"
    display_name = "Elastic APM Agent"

    def detect(self) -> DetectionOutcome:
        """Claim the build when an Elastic APM binding is complete."""

        binding = self.binding()
        if binding is None or not has_required_credentials(binding):
            return self._miss()
        return self._hit("elastic-apm-agent")

    def properties(self) -> dict[str, str]:
        """Return ``elastic.apm.*`` settings; credentials override the defaults."""

        settings = {"log_file_name": "STDOUT"}
        app_name = self.config.application_name
        if app_name:
            settings["service_name"] = app_name
        binding = self.binding()
        if binding is not None:
            server = binding.credential("server_url", "server_urls")
            if server:
                settings["server_urls"] = str(server)
            for key, value in binding.credentials.items():
                if isinstance(value, str) and key != "server_url":
                    settings[key] = value
        return settings

    def options(self) -> list[str]:
        """Return the ``elastic.apm.*`` properties, the agent flag and the agent home."""

        home = self.context.translator.translate(self.install_dir)
        options = [system_property(f"elastic.apm.{key}", value) for key, value in sorted(self.properties().items())]
        options.append(f"-javaagent:{self.agent_path()}")
        options.append(f"-Delastic.apm.home={home}")
        return options


__all__ = ["ElasticApmAgent", "has_required_credentials"]
