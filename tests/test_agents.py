# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for agent detection and the JVM options they contribute."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest

from javapack.agents import (
    DatadogAgent,
    DebugAgent,
    ElasticApmAgent,
    JacocoAgent,
    JavaOptsAgent,
    JavaOptsSettings,
    JmxAgent,
    NewRelicAgent,
    OpenTelemetryAgent,
    escape_option,
    escape_value,
    standard_agents,
)
from javapack.agents.base import system_property
from javapack.errors import ConfigurationError, InstallError, MissingPriorStateError
from javapack.options import OptionsAssembler
from javapack.providers.base import ProviderContext

from conftest import FakeInstaller


def _services(label: str, credentials: dict[str, Any], **extra: Any) -> dict[str, str]:
    return {"VCAP_SERVICES": json.dumps({label: [{"name": label, "credentials": credentials, **extra}]})}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("simple-value_1.0", "simple-value_1.0"),
        ("with space", "with\\ space"),
        ("$HOME/path:/x@y", "$HOME/path:/x@y"),
        ("quote'and\"", "quote\\'and\\\""),
        ("line\nbreak", "line'\n'break"),
        ("", "''"),
    ],
)
def test_escape_value(raw: str, expected: str) -> None:
    assert escape_value(raw) == expected


def test_escape_option_only_touches_value() -> None:
    assert escape_option("-Dgreeting=hello world") == "-Dgreeting=hello\\ world"
    assert escape_option("-Xmx1g") == "-Xmx1g"
    assert escape_option("-Dempty=") == "-Dempty=''"


def test_system_property_quotes_variable_references() -> None:
    assert system_property("app.name", "${APP_NAME}") == '-Dapp.name=\\"${APP_NAME}\\"'
    assert system_property("app.name", "my app") == "-Dapp.name=my\\ app"


def test_no_agents_by_default_except_java_opts(make_context: Callable[..., ProviderContext]) -> None:
    detected = [agent.name for agent, _ in standard_agents(make_context()).select_all()]
    assert detected == ["java-opts"]


def test_debug_agent_from_environment(make_context: Callable[..., ProviderContext]) -> None:
    agent = DebugAgent(make_context({"BPL_DEBUG_ENABLED": "true", "BPL_DEBUG_PORT": "9009"}))
    outcome = agent.detect()
    assert outcome.identifier == "debug=9009"
    assert agent.options() == ["-agentlib:jdwp=transport=dt_socket,server=y,address=9009,suspend=n"]


def test_debug_agent_from_override(make_context: Callable[..., ProviderContext]) -> None:
    agent = DebugAgent(make_context({"JBP_CONFIG_DEBUG": "{enabled: true, suspend: true}"}))
    assert agent.detect().matched
    assert agent.options() == ["-agentlib:jdwp=transport=dt_socket,server=y,address=8000,suspend=y"]


def test_environment_flag_beats_override(make_context: Callable[..., ProviderContext]) -> None:
    context = make_context({"JBP_CONFIG_JMX": "{enabled: true, port: 7000}", "BPL_JMX_ENABLED": "false"})
    assert not JmxAgent(context).detect().matched
    assert JmxAgent(make_context({"JBP_CONFIG_JMX": "{enabled: true, port: 7000}"})).port() == 7000


def test_jmx_options(make_context: Callable[..., ProviderContext]) -> None:
    agent = JmxAgent(make_context({"BPL_JMX_ENABLED": "1"}))
    agent.finalize()
    fragment = OptionsAssembler(agent.context.stager).fragments()[0]
    assert fragment.filename == "29_jmx.opts"
    assert "-Dcom.sun.management.jmxremote.port=5000" in fragment.content
    assert "-Dcom.sun.management.jmxremote.rmi.port=5000" in fragment.content


@pytest.mark.parametrize(
    ("raw", "from_environment", "options"),
    [
        (None, True, ()),
        (
            "{from_environment: false, java_opts: '-Xss512k -Dgreeting=\"hello world\"'}",
            False,
            ("-Xss512k", "-Dgreeting=hello world"),
        ),
        ("[{java_opts: [-Xss256k]}, {from_environment: false}]", False, ("-Xss256k",)),
        ("'{java_opts: [-Dx=1]}'", True, ("-Dx=1",)),
    ],
)
def test_java_opts_settings(raw: str | None, from_environment: bool, options: tuple[str, ...]) -> None:
    settings = JavaOptsSettings.parse(raw)
    assert settings.from_environment is from_environment
    assert settings.java_opts == options


@pytest.mark.parametrize("raw", ["{java_opts: '-Dx=\"unbalanced'}", "{java_opts: [", "42"])
def test_java_opts_settings_errors(raw: str) -> None:
    with pytest.raises(ConfigurationError):
        JavaOptsSettings.parse(raw)


def test_java_opts_agent_appends_user_opts(make_context: Callable[..., ProviderContext]) -> None:
    agent = JavaOptsAgent(make_context({"JBP_CONFIG_JAVA_OPTS": "{java_opts: '-Dgreeting=\"hello world\"'}"}))
    assert agent.options() == ["-Dgreeting=hello\\ world", "$JAVA_OPTS"]
    agent.finalize()
    fragment = OptionsAssembler(agent.context.stager).fragments()[0]
    assert fragment.filename == "99_user_java_opts.opts"


def test_java_opts_agent_can_be_disabled(make_context: Callable[..., ProviderContext]) -> None:
    agent = JavaOptsAgent(make_context({"JBP_CONFIG_JAVA_OPTS": "{from_environment: false}"}))
    assert not agent.detect().matched


def test_new_relic_agent(make_context: Callable[..., ProviderContext], installer: FakeInstaller) -> None:
    environ = _services("newrelic", {"licenseKey": "abc123"})
    environ["VCAP_APPLICATION"] = json.dumps({"application_name": "orders"})
    agent = NewRelicAgent(make_context(environ))

    assert agent.detect().identifier == "New Relic Agent"
    with pytest.raises(MissingPriorStateError):
        agent.agent_path()
    agent.supply()
    assert installer.names() == ["newrelic"]
    assert agent.options() == [
        "-javaagent:$DEPS_DIR/0/new_relic_agent/newrelic-agent-8.16.0.jar",
        "-Dnewrelic.config.license_key=abc123",
        "-Dnewrelic.config.app_name='orders'",
    ]


def test_java_agent_supply_failure_is_reported(
    make_context: Callable[..., ProviderContext], installer: FakeInstaller
) -> None:
    installer.failing.add("newrelic")
    agent = NewRelicAgent(make_context(_services("newrelic", {"licenseKey": "abc"})))
    with pytest.raises(InstallError):
        agent.supply()


def test_datadog_detection_rules(make_context: Callable[..., ProviderContext]) -> None:
    assert DatadogAgent(make_context({"DD_API_KEY": "key"})).detect().matched
    assert not DatadogAgent(make_context({"DD_API_KEY": "key", "DD_APM_ENABLED": "false"})).detect().matched
    assert not DatadogAgent(make_context()).detect().matched


def test_datadog_options(make_context: Callable[..., ProviderContext]) -> None:
    environ = {
        "DD_API_KEY": "key",
        "VCAP_APPLICATION": json.dumps({"application_name": "orders", "application_version": "v-1"}),
    }
    agent = DatadogAgent(make_context(environ))
    agent.supply()
    assert agent.options() == [
        "-javaagent:$DEPS_DIR/0/datadog_javaagent/dd-java-agent-1.44.1.jar",
        "-Ddd.service=orders",
        "-Ddd.version=v-1",
    ]
    environ["DD_SERVICE"] = "custom"
    assert "-Ddd.service=orders" not in DatadogAgent(make_context(environ)).options()


def test_elastic_apm_requires_credentials(make_context: Callable[..., ProviderContext]) -> None:
    partial = _services("elastic-apm", {"server_urls": "https://apm.example.com"})
    assert not ElasticApmAgent(make_context(partial)).detect().matched


def test_elastic_apm_options(make_context: Callable[..., ProviderContext]) -> None:
    environ = _services("elastic-apm", {"server_url": "https://apm.example.com", "secret_token": "s3cr3t"})
    environ["VCAP_APPLICATION"] = json.dumps({"application_name": "orders"})
    agent = ElasticApmAgent(make_context(environ))
    assert agent.detect().matched
    agent.supply()

    options = agent.options()
    assert options[:4] == [
        "-Delastic.apm.log_file_name=STDOUT",
        "-Delastic.apm.secret_token=s3cr3t",
        "-Delastic.apm.server_urls=https://apm.example.com",
        "-Delastic.apm.service_name=orders",
    ]
    assert options[4] == "-javaagent:$DEPS_DIR/0/elastic_apm_agent/elastic-apm-agent-1.52.1.jar"
    assert options[5] == "-Delastic.apm.home=$DEPS_DIR/0/elastic_apm_agent"


def test_open_telemetry_options(make_context: Callable[..., ProviderContext]) -> None:
    environ = _services(
        "user-provided",
        {"otel.exporter.otlp.endpoint": "https://otel.example.com", "unrelated": "x"},
        tags=["otel-collector"],
    )
    agent = OpenTelemetryAgent(make_context(environ))
    agent.supply()
    options = agent.options()
    assert options[0] == "-javaagent:$DEPS_DIR/0/open_telemetry_javaagent/opentelemetry-javaagent.jar"
    assert "-Dotel.exporter.otlp.endpoint=https://otel.example.com" in options
    assert "-Dotel.service.name=app" in options
    assert not any("unrelated" in option for option in options)


def test_jacoco_options(make_context: Callable[..., ProviderContext]) -> None:
    assert not JacocoAgent(make_context(_services("jacoco", {"port": 6300}))).detect().matched

    agent = JacocoAgent(make_context(_services("jacoco", {"address": "coverage.example.com", "port": 6300})))
    assert agent.detect().matched
    agent.supply()
    assert agent.options() == [
        "-javaagent:$DEPS_DIR/0/jacoco_agent/lib/jacocoagent.jar="
        "address=coverage.example.com,output=tcpclient,sessionid=$CF_INSTANCE_GUID,port=6300"
    ]


def test_agent_supply_failure_does_not_stop_others(
    make_context: Callable[..., ProviderContext], installer: FakeInstaller
) -> None:
    installer.failing.add("newrelic")
    environ = _services("newrelic", {"licenseKey": "abc"})
    environ["BPL_DEBUG_ENABLED"] = "true"
    registry = standard_agents(make_context(environ))

    detected = [agent for agent, _ in registry.select_all()]
    assert [agent.name for agent in detected] == ["newrelic", "debug", "java-opts"]
    supplied = registry.supply_each(detected)
    assert [agent.name for agent in supplied] == ["debug", "java-opts"]
