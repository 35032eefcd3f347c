# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Concrete Java runtime vendors."""

from __future__ import annotations

from .base import JreProvider


class OpenJdkJre(JreProvider):
    """OpenJDK, the default runtime."""

    name = "openjdk"
    display_name = "OpenJDK"
    dependency = "openjdk"
    config_key = "open_jdk_jre"


class ZuluJre(JreProvider):
    """Azul Zulu OpenJDK builds."""

    name = "zulu"
    display_name = "Zulu"
    dependency = "zulu"
    config_key = "zulu_jre"
    home_prefixes = ("zulu", "jdk", "jre")


class SapMachineJre(JreProvider):
    """SAP's OpenJDK distribution."""

    name = "sapmachine"
    display_name = "SapMachine"
    dependency = "sapmachine"
    config_key = "sap_machine_jre"
    home_prefixes = ("sapmachine", "jdk", "jre")


class GraalVmJre(JreProvider):
    """GraalVM community edition."""

    name = "graalvm"
    display_name = "GraalVM"
    dependency = "graalvm"
    config_key = "graal_vm_jre"
    home_prefixes = ("graalvm", "jdk", "jre")


class OracleJre(JreProvider):
    """Oracle JRE."""

    name = "oracle"
    display_name = "Oracle JRE"
    dependency = "oracle"
    config_key = "oracle_jre"


class IbmJre(JreProvider):
    """IBM Java runtime."""

    name = "ibm"
    display_name = "IBM JRE"
    dependency = "ibm"
    config_key = "ibm_jre"
    home_prefixes = ("ibm-java", "jre")


class ZingJre(JreProvider):
    """Azul Zing (Prime) runtime."""

    name = "zing"
    display_name = "Zing JRE"
    dependency = "zing"
    config_key = "zing_jre"
    home_prefixes = ("zing",)


__all__ = [
    "GraalVmJre",
    "IbmJre",
    "OpenJdkJre",
    "OracleJre",
    "SapMachineJre",
    "ZingJre",
    "ZuluJre",
]
