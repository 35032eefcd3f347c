# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Container providers describing how an application is launched."""

from __future__ import annotations

from ..logging import BuildLog
from ..providers.base import ProviderContext
from ..providers.registry import ContainerRegistry
from .dist_zip import DistZipContainer
from .groovy import GroovyContainer
from .java_main import JavaMainContainer
from .manifest import JarManifest
from .play import PlayContainer
from .spring_boot import SpringBootContainer
from .spring_boot_cli import SpringBootCliContainer
from .tomcat import TomcatContainer


def standard_containers(context: ProviderContext, *, log: BuildLog | None = None) -> ContainerRegistry:
    """Return the container registry in detection order.

    More specific application shapes come first so that, for example, a Spring
    Boot fat JAR is never claimed by the generic Java main-class container.
    """

    providers = (
        SpringBootContainer(context),
        TomcatContainer(context),
        SpringBootCliContainer(context),
        GroovyContainer(context),
        PlayContainer(context),
        DistZipContainer(context),
        JavaMainContainer(context),
    )
    return ContainerRegistry(providers, log=log or context.log)


__all__ = [
    "DistZipContainer",
    "GroovyContainer",
    "JarManifest",
    "JavaMainContainer",
    "PlayContainer",
    "SpringBootCliContainer",
    "SpringBootContainer",
    "TomcatContainer",
    "standard_containers",
]
