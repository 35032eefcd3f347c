# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Datadog APM java agent."""

from __future__ import annotations

from ..models import DetectionOutcome
from .base import JavaAgent, system_property


class DatadogAgent(JavaAgent):
    """Enabled by ``DD_API_KEY`` or a ``datadog`` binding unless ``DD_APM_ENABLED=false``."""

    name = "datadog"
    priority = 19
    config_key = "datadog_javaagent"
    dependency = "datadog-javaagent"
    install_dirname = "datadog_javaagent"
    service_terms = ("datadog",)
    jar_pattern = "dd-java-agent*.jar"
    display_name = "Datadog APM"

    def detect(self) -> DetectionOutcome:
        """Claim the build unless Datadog is unconfigured or explicitly disabled."""

        if self.config.get("DD_API_KEY") is None and self.binding() is None:
            return self._miss()
        if self.config.flag("DD_APM_ENABLED") is False:
            return self._miss()
        return self._hit("datadog-javaagent")

    def options(self) -> list[str]:
        """Return the agent flag plus service and version defaults not set by ``DD_*``."""

        options = [f"-javaagent:{self.agent_path()}"]
        if self.config.get("DD_SERVICE") is None:
            options.append(system_property("dd.service", self.config.application_name or self.build_dir.name))
        version = self.config.application.get("application_version")
        if version and self.config.get("DD_VERSION") is None:
            options.append(system_property("dd.version", version))
        return options


__all__ = ["DatadogAgent"]
