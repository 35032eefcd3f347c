# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for container detection, supply, finalize and start commands."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from javapack.containers import (
    DistZipContainer,
    GroovyContainer,
    JarManifest,
    JavaMainContainer,
    PlayContainer,
    SpringBootCliContainer,
    SpringBootContainer,
    TomcatContainer,
    standard_containers,
)
from javapack.containers.dist_zip import augment_classpath
from javapack.containers.play import PlayKind, find_play_layouts, is_post22
from javapack.containers.spring_boot import LAUNCHER_V2, LAUNCHER_V3, launcher_class
from javapack.containers.tomcat import tomcat_line_for
from javapack.errors import AmbiguousMatchError, ConfigurationError, MissingPriorStateError, NoMatchError
from javapack.providers.base import ProviderContext
from javapack.runtimes import OpenJdkJre

BOOT_MANIFEST = (
    "Manifest-Version: 1.0\n"
    "Main-Class: org.springframework.boot.loader.JarLauncher\n"
    "Start-Class: com.example.Application\n"
    "Spring-Boot-Version: 2.7.0\n"
    "\n"
)


def _write(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _select(context: ProviderContext) -> str:
    provider, _ = standard_containers(context).select()
    return provider.name


def test_manifest_parsing_joins_continuations() -> None:
    manifest = JarManifest.parse(
        "Manifest-Version: 1.0\r\n"
        "Main-Class: com.example.VeryLong\r\n"
        " MainClass\r\n"
        "\r\n"
        "Name: ignored/\r\n"
        "Sealed: true\r\n"
    )
    assert manifest.main_class == "com.example.VeryLongMainClass"
    assert "Sealed" not in manifest
    assert len(manifest) == 2


def test_manifest_from_broken_archive_is_empty(tmp_path: Path) -> None:
    broken = _write(tmp_path / "broken.jar", "nope")
    assert len(JarManifest.from_archive(broken)) == 0
    assert JarManifest.from_directory(tmp_path).main_class is None


@pytest.mark.parametrize(
    ("attributes", "expected"),
    [
        ({"Spring-Boot-Version": "2.7.0"}, LAUNCHER_V2),
        ({"Spring-Boot-Version": "3.2.1"}, LAUNCHER_V3),
        ({"Start-Class": "com.example.App"}, LAUNCHER_V3),
        (
            {"Main-Class": "org.example.CustomJarLauncher", "Spring-Boot-Version": "3.2.1"},
            "org.example.CustomJarLauncher",
        ),
    ],
)
def test_launcher_class(attributes: dict[str, str], expected: str) -> None:
    assert launcher_class(JarManifest(attributes)) == expected


def test_exploded_spring_boot_release(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    (build_dir / "BOOT-INF" / "classes").mkdir(parents=True)
    _write(build_dir / "META-INF" / "MANIFEST.MF", BOOT_MANIFEST)
    context = make_context()

    assert _select(context) == "spring-boot"
    assert SpringBootContainer(context).release() == (
        "eval exec $JAVA_HOME/bin/java $JAVA_OPTS -cp $HOME org.springframework.boot.loader.JarLauncher"
    )


def test_exploded_boot_without_boot_markers(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    (build_dir / "BOOT-INF").mkdir()
    _write(build_dir / "META-INF" / "MANIFEST.MF", "Main-Class: com.example.Main\n")
    release = SpringBootContainer(make_context()).release()
    assert release.endswith("-cp $HOME:$HOME/BOOT-INF/classes:$HOME/BOOT-INF/lib/* com.example.Main")


def test_executable_boot_jar(
    build_dir: Path, make_context: Callable[..., ProviderContext], write_jar: Callable[..., Path]
) -> None:
    write_jar(build_dir / "orders.jar", BOOT_MANIFEST)
    context = make_context()
    assert _select(context) == "spring-boot"
    assert SpringBootContainer(context).release() == "eval exec $JAVA_HOME/bin/java $JAVA_OPTS -jar $HOME/orders.jar"


def test_staged_boot_distribution(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    _write(build_dir / "lib" / "spring-boot-3.2.1.jar")
    script = _write(build_dir / "bin" / "orders", "#!/bin/sh\n")
    _write(build_dir / "bin" / "orders.bat")
    container = SpringBootContainer(make_context())
    container.supply()

    assert os.access(script, os.X_OK)
    assert container.release() == "$HOME/bin/orders"


def test_conflicting_boot_layouts_are_ambiguous(
    build_dir: Path, make_context: Callable[..., ProviderContext], write_jar: Callable[..., Path]
) -> None:
    (build_dir / "BOOT-INF").mkdir()
    _write(build_dir / "META-INF" / "MANIFEST.MF", BOOT_MANIFEST)
    write_jar(build_dir / "spring-app.jar", BOOT_MANIFEST)

    with pytest.raises(AmbiguousMatchError) as excinfo:
        standard_containers(make_context()).select()
    assert excinfo.value.provider == "spring-boot"


def test_tomcat_line_for_java_major() -> None:
    assert tomcat_line_for(8) == "9.*"
    assert tomcat_line_for(11) == "10.*"
    assert tomcat_line_for(21) == "10.*"


def test_tomcat_supply_and_finalize(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    (build_dir / "WEB-INF").mkdir()
    context = make_context({"JBP_CONFIG_TOMCAT": "{access_logging_support: {access_logging: enabled}}"})
    OpenJdkJre(context).supply()
    tomcat = TomcatContainer(context)

    assert _select(context) == "tomcat"
    tomcat.supply()
    home = context.stager.dep_dir / "tomcat" / "apache-tomcat-10.1.34"
    assert tomcat.catalina_home() == home
    profile = (context.stager.profile_d_dir / "tomcat.sh").read_text(encoding="utf-8")
    assert "export CATALINA_HOME=$DEPS_DIR/0/tomcat/apache-tomcat-10.1.34" in profile
    assert "-Dhttp.port=$PORT -Daccess.logging.enabled=true" in profile

    tomcat.finalize()
    root_xml = (home / "conf" / "Catalina" / "localhost" / "ROOT.xml").read_text(encoding="utf-8")
    assert 'docBase="${user.home}/app"' in root_xml
    assert tomcat.release() == "$CATALINA_HOME/bin/catalina.sh run"


def test_tomcat_follows_installed_java(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    _write(build_dir / "orders.war")
    context = make_context({"BP_JAVA_VERSION": "8"})
    OpenJdkJre(context).supply()
    assert TomcatContainer(context).resolve_dependency().version == "9.0.98"


def test_tomcat_version_override(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    context = make_context({"JBP_CONFIG_TOMCAT": "{version: 9.+}"})
    assert TomcatContainer(context).resolve_dependency().version == "9.0.98"


def test_tomcat_finalize_requires_supply(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    (build_dir / "WEB-INF").mkdir()
    with pytest.raises(MissingPriorStateError):
        TomcatContainer(make_context()).finalize()


def test_java_main_executable_jar(
    build_dir: Path, make_context: Callable[..., ProviderContext], write_jar: Callable[..., Path]
) -> None:
    write_jar(build_dir / "app.jar", "Main-Class: com.example.Main\n")
    context = make_context()
    assert _select(context) == "java-main"
    assert JavaMainContainer(context).release() == "eval exec $JAVA_HOME/bin/java $JAVA_OPTS -jar $HOME/app.jar"


def test_java_main_class_variable_builds_classpath(
    build_dir: Path, make_context: Callable[..., ProviderContext], write_jar: Callable[..., Path]
) -> None:
    write_jar(build_dir / "app.jar", "Main-Class: com.example.Main\n")
    write_jar(build_dir / "lib" / "dep.jar")
    release = JavaMainContainer(make_context({"JAVA_MAIN_CLASS": "com.example.Other"})).release()
    assert release == (
        "eval exec $JAVA_HOME/bin/java $JAVA_OPTS -cp $HOME:$HOME/app.jar:$HOME/lib/dep.jar com.example.Other"
    )


def test_java_main_finalize_records_classpath(
    build_dir: Path, make_context: Callable[..., ProviderContext], write_jar: Callable[..., Path]
) -> None:
    write_jar(build_dir / "app.jar", "Main-Class: com.example.Main\n")
    write_jar(build_dir / "lib" / "dep.jar")
    context = make_context()

    JavaMainContainer(context).finalize()

    classpath = context.stager.env_dir / "CLASSPATH"
    assert classpath.read_text(encoding="utf-8") == "$HOME:$HOME/app.jar:$HOME/lib/dep.jar"


def test_java_main_loose_classes_need_a_main_class(
    build_dir: Path, make_context: Callable[..., ProviderContext]
) -> None:
    _write(build_dir / "Main.class")
    container = JavaMainContainer(make_context())
    assert container.detect().matched
    with pytest.raises(ConfigurationError, match="JAVA_MAIN_CLASS"):
        container.release()


def test_java_main_class_from_override(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    _write(build_dir / "Main.class")
    container = JavaMainContainer(make_context({"JBP_CONFIG_JAVA_MAIN": "{java_main_class: com.example.Main}"}))
    assert container.release().endswith("-cp $HOME com.example.Main")


def test_play_post22_staged(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    _write(build_dir / "lib" / "com.typesafe.play.play_2.11-2.4.3.jar")
    _write(build_dir / "bin" / "orders", "#!/bin/sh\n")
    context = make_context()

    layouts = find_play_layouts(build_dir)
    assert [layout.kind for layout in layouts] == [PlayKind.POST22_STAGED]
    assert _select(context) == "play"
    assert PlayContainer(context).detect().identifier == "Play Framework 2.4.3"
    assert PlayContainer(context).release() == "$HOME/bin/orders"
    assert not DistZipContainer(context).detect().matched


def test_play_pre22_staged(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    _write(build_dir / "staged" / "play_2.10-2.1.0.jar")
    _write(build_dir / "start", "#!/bin/sh\n")
    container = PlayContainer(make_context())
    assert container.layout().kind is PlayKind.PRE22_STAGED
    assert container.release() == "$HOME/start"


def test_play_multiple_layouts_are_ambiguous(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    for root in (build_dir, build_dir / "application-root"):
        _write(root / "lib" / "com.typesafe.play.play_2.11-2.4.3.jar")
        _write(root / "bin" / "orders", "#!/bin/sh\n")
    outcome = PlayContainer(make_context()).detect()
    assert not outcome.matched
    assert outcome.ambiguity is not None


@pytest.mark.parametrize(("version", "expected"), [("2.2.0", True), ("2.1.5", False), ("3.0.0", True), ("2", False)])
def test_is_post22(version: str, expected: bool) -> None:
    assert is_post22(version) is expected


def test_dist_zip_augments_classpath(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    _write(build_dir / "lib" / "orders.jar")
    script = _write(
        build_dir / "bin" / "orders",
        '#!/bin/bash\ndeclare -r app_classpath="$app_home/../lib/orders.jar"\nexec java\n',
    )
    context = make_context()
    _write(context.stager.dep_dir / "container_security_provider" / "provider.jar")
    container = DistZipContainer(context)

    assert _select(context) == "dist-zip"
    container.supply()
    container.finalize()
    content = script.read_text(encoding="utf-8")
    assert (
        'declare -r app_classpath="/home/vcap/deps/0/container_security_provider/provider.jar:'
        '$app_home/../lib/orders.jar"'
    ) in content
    assert (context.stager.profile_d_dir / "dist_zip.sh").is_file()
    assert container.release() == "$HOME/bin/orders"

    container.finalize()
    assert script.read_text(encoding="utf-8") == content


def test_augment_plain_classpath_assignment(tmp_path: Path) -> None:
    script = _write(tmp_path / "start", "CLASSPATH=$APP_HOME/lib/app.jar\n")
    assert augment_classpath(script, ["/home/vcap/deps/0/a/a.jar"])
    assert script.read_text(encoding="utf-8") == "CLASSPATH=/home/vcap/deps/0/a/a.jar:$APP_HOME/lib/app.jar\n"
    assert not augment_classpath(_write(tmp_path / "other", "exec java\n"), ["/x.jar"])
    assert not augment_classpath(script, [])


def test_dist_zip_under_application_root(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    _write(build_dir / "application-root" / "lib" / "orders.jar")
    _write(build_dir / "application-root" / "bin" / "orders", "#!/bin/sh\n")
    assert DistZipContainer(make_context()).release() == "$HOME/application-root/bin/orders"


def test_groovy_script(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    _write(build_dir / "app.groovy", 'println "hello"\n')
    _write(build_dir / "lib" / "helper.jar")
    context = make_context()
    groovy = GroovyContainer(context)

    assert _select(context) == "groovy"
    groovy.supply()
    profile = (context.stager.profile_d_dir / "groovy.sh").read_text(encoding="utf-8")
    assert profile == "export GROOVY_HOME=$DEPS_DIR/0/groovy/groovy-4.0.24\n"
    groovy.finalize()
    assert groovy.release() == "$GROOVY_HOME/bin/groovy $JAVA_OPTS -cp lib/helper.jar app.groovy"


def test_groovy_multiple_scripts(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    _write(build_dir / "a.groovy", 'println "a"\n')
    _write(build_dir / "b.groovy", "#!/usr/bin/env groovy\nclass B {}\n")
    assert GroovyContainer(make_context()).detect().ambiguity is not None

    chosen = GroovyContainer(make_context({"GROOVY_SCRIPT": "b.groovy"}))
    assert chosen.detect().matched
    assert chosen.release().endswith(" b.groovy")
    assert not GroovyContainer(make_context({"GROOVY_SCRIPT": "missing.groovy"})).detect().matched


def test_groovy_finalize_requires_supply(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    _write(build_dir / "app.groovy", 'println "hello"\n')
    with pytest.raises(MissingPriorStateError):
        GroovyContainer(make_context()).finalize()


def test_spring_boot_cli_application(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    source = '@RestController\nclass App {\n  @RequestMapping("/")\n  String home() { "hi" }\n}\n'
    _write(build_dir / "app.groovy", source)
    _write(build_dir / "config" / "beans.groovy", "beans {\n  greeting(String, 'hi')\n}\n")
    context = make_context()
    cli = SpringBootCliContainer(context)

    assert _select(context) == "spring-boot-cli"
    assert not GroovyContainer(context).detect().matched
    cli.supply()
    profile = (context.stager.profile_d_dir / "spring-boot-cli.sh").read_text(encoding="utf-8")
    assert "export SPRING_BOOT_CLI_HOME=$DEPS_DIR/0/spring-boot-cli/spring-3.4.1" in profile
    assert "export SERVER_PORT=$PORT" in profile
    cli.finalize()
    assert cli.release() == "$SPRING_BOOT_CLI_HOME/bin/spring run app.groovy config/beans.groovy"


def test_spring_boot_cli_skips_web_applications(build_dir: Path, make_context: Callable[..., ProviderContext]) -> None:
    (build_dir / "WEB-INF").mkdir()
    _write(build_dir / "App.groovy", "class App {}\n")
    assert not SpringBootCliContainer(make_context()).detect().matched


def test_no_container_matches_empty_tree(make_context: Callable[..., ProviderContext]) -> None:
    with pytest.raises(NoMatchError):
        standard_containers(make_context()).select()
