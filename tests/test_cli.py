# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI tests for the phase commands."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from javapack.cli import app
from javapack.staging import Stager

from conftest import FakeInstaller


@pytest.fixture
def offline(monkeypatch: pytest.MonkeyPatch, installer: FakeInstaller) -> FakeInstaller:
    monkeypatch.setattr("javapack.lifecycle.ArchiveInstaller", lambda cache_dir: installer)
    for name in ("VCAP_SERVICES", "VCAP_APPLICATION", "BP_JAVA_VERSION", "JBP_CONFIG_COMPONENTS", "CF_STACK"):
        monkeypatch.delenv(name, raising=False)
    return installer


def _phase_args(stager: Stager) -> list[str]:
    return [str(stager.build_dir), str(stager.cache_dir), str(stager.deps_dir), stager.deps_idx]


def test_detect_reports_java(build_dir: Path) -> None:
    (build_dir / "pom.xml").write_text("<project/>", encoding="utf-8")
    result = CliRunner().invoke(app, ["detect", str(build_dir)])
    assert result.exit_code == 0
    assert "Maven project" in result.stdout


def test_detect_fails_for_other_languages(build_dir: Path) -> None:
    (build_dir / "index.js").write_text("", encoding="utf-8")
    result = CliRunner().invoke(app, ["detect", str(build_dir)])
    assert result.exit_code == 1


def test_supply_finalize_release(build_dir: Path, stager: Stager, offline: FakeInstaller) -> None:
    (build_dir / "WEB-INF").mkdir()
    runner = CliRunner()

    supply = runner.invoke(app, ["supply", *_phase_args(stager)])
    assert supply.exit_code == 0, supply.output
    assert "Supplied Tomcat on OpenJDK" in supply.stdout
    assert "tomcat" in offline.names()

    finalize = runner.invoke(app, ["finalize", *_phase_args(stager)])
    assert finalize.exit_code == 0, finalize.output

    release = runner.invoke(app, ["release", str(build_dir)])
    assert release.exit_code == 0
    document = yaml.safe_load(release.stdout)
    assert document["default_process_types"]["web"].endswith("$CATALINA_HOME/bin/catalina.sh run")


def test_finalize_before_supply_fails(build_dir: Path, stager: Stager, offline: FakeInstaller) -> None:
    (build_dir / "WEB-INF").mkdir()
    result = CliRunner().invoke(app, ["finalize", *_phase_args(stager)])
    assert result.exit_code == 1


def test_release_before_finalize_fails(build_dir: Path) -> None:
    result = CliRunner().invoke(app, ["release", str(build_dir)])
    assert result.exit_code == 1


def test_supply_without_container_fails(build_dir: Path, stager: Stager, offline: FakeInstaller) -> None:
    result = CliRunner().invoke(app, ["supply", *_phase_args(stager)])
    assert result.exit_code == 1
    assert offline.names() == []
