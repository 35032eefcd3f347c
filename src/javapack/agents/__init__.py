# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Agent providers that contribute JVM options alongside the application."""

from __future__ import annotations

from ..logging import BuildLog
from ..providers.base import ProviderContext
from ..providers.registry import AgentRegistry
from .base import ContributingAgent, JavaAgent, PortAgent, escape_option, escape_value
from .datadog import DatadogAgent
from .debug import DebugAgent
from .elastic_apm import ElasticApmAgent
from .jacoco import JacocoAgent
from .java_opts import JavaOptsAgent, JavaOptsSettings
from .jmx import JmxAgent
from .new_relic import NewRelicAgent
from .open_telemetry import OpenTelemetryAgent


def standard_agents(context: ProviderContext, *, log: BuildLog | None = None) -> AgentRegistry:
    """Return the agent registry; every matching agent participates."""

    providers = (
        NewRelicAgent(context),
        DatadogAgent(context),
        ElasticApmAgent(context),
        OpenTelemetryAgent(context),
        JacocoAgent(context),
        DebugAgent(context),
        JmxAgent(context),
        JavaOptsAgent(context),
    )
    return AgentRegistry(providers, log=log or context.log)


__all__ = [
    "ContributingAgent",
    "DatadogAgent",
    "DebugAgent",
    "ElasticApmAgent",
    "JacocoAgent",
    "JavaAgent",
    "JavaOptsAgent",
    "JavaOptsSettings",
    "JmxAgent",
    "NewRelicAgent",
    "OpenTelemetryAgent",
    "PortAgent",
    "escape_option",
    "escape_value",
    "standard_agents",
]
