# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end tests for the supply, finalize and release phases."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
import yaml

from javapack.errors import MissingPriorStateError, NoMatchError
from javapack.lifecycle import Lifecycle, Phase, read_release
from javapack.options import OptionsAssembler

from conftest import FakeInstaller

BOOT_MANIFEST = (
    "Manifest-Version: 1.0\n"
    "Main-Class: org.springframework.boot.loader.JarLauncher\n"
    "Start-Class: com.example.Application\n"
    "Spring-Boot-Version: 2.7.0\n"
)


@pytest.fixture
def boot_app(build_dir: Path) -> Path:
    (build_dir / "BOOT-INF" / "classes" / "com" / "example").mkdir(parents=True)
    (build_dir / "BOOT-INF" / "classes" / "com" / "example" / "Application.class").write_bytes(b"")
    (build_dir / "META-INF").mkdir()
    (build_dir / "META-INF" / "MANIFEST.MF").write_text(BOOT_MANIFEST, encoding="utf-8")
    return build_dir


def test_spring_boot_application_end_to_end(
    boot_app: Path, make_lifecycle: Callable[..., Lifecycle], installer: FakeInstaller
) -> None:
    lifecycle = make_lifecycle()
    assert lifecycle.phase() is Phase.NOT_STARTED

    record = lifecycle.supply()
    assert lifecycle.phase() is Phase.SUPPLIED
    assert record.container == "spring-boot"
    assert record.container_identifier == "Spring Boot"
    assert record.runtime == "openjdk"
    assert record.runtime_version == "17.0.13"
    assert record.agents == ["java-opts"]
    assert installer.names() == ["openjdk", "jvmkill", "memory-calculator"]

    descriptor = make_lifecycle().finalize()
    assert lifecycle.phase() is Phase.FINALIZED
    assert descriptor.start_command == (
        "eval exec $JAVA_HOME/bin/java $JAVA_OPTS -cp $HOME org.springframework.boot.loader.JarLauncher"
    )

    document = yaml.safe_load(read_release(boot_app))
    web = document["default_process_types"]["web"]
    assert web.startswith("CALCULATED_MEMORY=$($DEPS_DIR/0/jre/bin/java-buildpack-memory-calculator-4.2.0 ")
    assert web.endswith(f"&& {descriptor.start_command}")
    assert len(read_release(boot_app).strip().splitlines()) == 2
    assert lifecycle.release() == read_release(boot_app)

    contributors = [fragment.contributor for fragment in OptionsAssembler(lifecycle.stager).fragments()]
    assert contributors == ["jre", "user_java_opts"]
    assert (lifecycle.stager.profile_d_dir / "00_java_opts.sh").is_file()
    assert (lifecycle.stager.profile_d_dir / "java.sh").is_file()


def test_finalize_is_repeatable(boot_app: Path, make_lifecycle: Callable[..., Lifecycle]) -> None:
    environ = {"BPL_DEBUG_ENABLED": "true"}
    make_lifecycle(environ).supply()
    first = make_lifecycle(environ).finalize()
    fragments = OptionsAssembler(make_lifecycle(environ).stager).fragments()
    second = make_lifecycle(environ).finalize()

    assert first == second
    assert OptionsAssembler(make_lifecycle(environ).stager).fragments() == fragments
    assert [fragment.contributor for fragment in fragments] == ["jre", "debug", "user_java_opts"]


def test_finalize_without_supply(boot_app: Path, make_lifecycle: Callable[..., Lifecycle]) -> None:
    with pytest.raises(MissingPriorStateError, match="supply has not completed"):
        make_lifecycle().finalize()


def test_finalize_rejects_changed_detection(boot_app: Path, make_lifecycle: Callable[..., Lifecycle]) -> None:
    make_lifecycle().supply()
    with pytest.raises(MissingPriorStateError, match="agents"):
        make_lifecycle({"BPL_JMX_ENABLED": "true"}).finalize()
    with pytest.raises(MissingPriorStateError, match="runtime"):
        make_lifecycle({"JBP_CONFIG_ZULU_JRE": "{}"}).finalize()


def test_unreadable_marker(boot_app: Path, make_lifecycle: Callable[..., Lifecycle]) -> None:
    lifecycle = make_lifecycle()
    lifecycle.supply()
    lifecycle.stager.marker_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(MissingPriorStateError, match="unreadable"):
        lifecycle.finalize()


def test_failed_agent_is_skipped_but_remembered(
    boot_app: Path, make_lifecycle: Callable[..., Lifecycle], installer: FakeInstaller
) -> None:
    installer.failing.add("newrelic")
    environ = {"VCAP_SERVICES": json.dumps({"newrelic": [{"name": "nr", "credentials": {"licenseKey": "k"}}]})}

    record = make_lifecycle(environ).supply()
    assert record.agents == ["java-opts"]
    assert record.skipped_agents == ["newrelic"]

    make_lifecycle(environ).finalize()
    contributors = [fragment.contributor for fragment in OptionsAssembler(make_lifecycle().stager).fragments()]
    assert "newrelic" not in contributors


def test_supply_clears_previous_state(boot_app: Path, make_lifecycle: Callable[..., Lifecycle]) -> None:
    lifecycle = make_lifecycle()
    lifecycle.supply()
    lifecycle.finalize()
    assert lifecycle.phase() is Phase.FINALIZED

    lifecycle.supply()
    assert lifecycle.phase() is Phase.SUPPLIED
    with pytest.raises(MissingPriorStateError):
        lifecycle.release()


def test_restaging_drops_options_of_agents_no_longer_bound(
    boot_app: Path, make_lifecycle: Callable[..., Lifecycle]
) -> None:
    services = {"VCAP_SERVICES": json.dumps({"newrelic": [{"name": "nr", "credentials": {"licenseKey": "abc"}}]})}
    make_lifecycle(services).supply()
    make_lifecycle(services).finalize()
    stager = make_lifecycle().stager
    assert "newrelic" in OptionsAssembler(stager).render_script()
    stale = stager.java_opts_dir / "50_retired-agent.opts"
    stale.write_text("-javaagent:/stale/agent.jar", encoding="utf-8")

    record = make_lifecycle().supply()
    make_lifecycle().finalize()

    assert record.agents == ["java-opts"]
    assert not stale.exists()
    script = OptionsAssembler(stager).render_script()
    assert "newrelic" not in script
    assert "retired-agent" not in script
    contributors = [fragment.contributor for fragment in OptionsAssembler(stager).fragments()]
    assert contributors == ["jre", "user_java_opts"]

def test_supply_without_container_leaves_no_marker(make_lifecycle: Callable[..., Lifecycle]) -> None:
    lifecycle = make_lifecycle()
    with pytest.raises(NoMatchError):
        lifecycle.supply()
    assert lifecycle.read_record() is None
    assert lifecycle.phase() is Phase.NOT_STARTED


def test_tomcat_application_end_to_end(build_dir: Path, make_lifecycle: Callable[..., Lifecycle]) -> None:
    (build_dir / "WEB-INF" / "classes").mkdir(parents=True)
    make_lifecycle().supply()
    descriptor = make_lifecycle().finalize()

    assert descriptor.start_command == "$CATALINA_HOME/bin/catalina.sh run"
    assert descriptor.web_command.endswith(" && $CATALINA_HOME/bin/catalina.sh run")
