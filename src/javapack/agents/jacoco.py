# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JaCoCo coverage agent streaming to a remote TCP server."""

from __future__ import annotations

from ..errors import ConfigurationError
from ..models import DetectionOutcome
from .base import JavaAgent

OPTIONAL_CREDENTIALS = ("excludes", "includes", "port", "output")


class JacocoAgent(JavaAgent):
    """Attach JaCoCo when a ``jacoco`` binding supplies an ``address``."""

    name = "jacoco"
    priority = 26
    config_key = "jacoco_agent"
    dependency = "jacoco"
    install_dirname = "jacoco_agent"
    service_terms = ("jacoco",)
    jar_pattern = "jacocoagent.jar"
    display_name = "JaCoCo Agent"

    def detect(self) -> DetectionOutcome:
        """Claim the build when the ``jacoco`` binding has an ``address``."""

        binding = self.binding()
        if binding is None or not binding.credential("address"):
            return self._miss()
        return self._hit(self.display_name)

    def agent_arguments(self) -> dict[str, str]:
        """Return the ``-javaagent`` arguments built from the binding.

        Returns:
            dict[str, str]: ``address``, ``output`` and ``sessionid`` plus any
            optional credentials the binding sets.

        Raises:
            ConfigurationError: If the binding or its ``address`` is missing.

        """

        binding = self.binding()
        address = binding.credential("address") if binding is not None else None
        if binding is None or not address:
            raise ConfigurationError("jacoco binding is missing the 'address' credential")
        arguments = {"address": str(address), "output": "tcpclient", "sessionid": "$CF_INSTANCE_GUID"}
        for key in OPTIONAL_CREDENTIALS:
            value = binding.credential(key)
            if value:
                arguments[key] = str(value)
        return arguments

    def options(self) -> list[str]:
        """Return the ``-javaagent`` flag with its comma-joined arguments."""

        arguments = ",".join(f"{key}={value}" for key, value in self.agent_arguments().items())
        return [f"-javaagent:{self.agent_path()}={arguments}"]


__all__ = ["JacocoAgent"]
