# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Two-phase staging orchestration: supply, finalize and release."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from pathlib import Path

import yaml
from pydantic import ValidationError

from .agents import standard_agents
from .catalog import DependencyCatalog
from .config import ConfigSnapshot
from .constants import RELEASE_DESCRIPTOR_PATH
from .containers import standard_containers
from .errors import ConfigurationError, MissingPriorStateError
from .installer import ArchiveInstaller, DependencyInstaller
from .logging import BuildLog
from .models import ReleaseDescriptor, SupplyRecord
from .options import OptionsAssembler
from .providers.base import AgentProvider, ProviderContext
from .providers.registry import AgentRegistry, ContainerRegistry, RuntimeRegistry
from .runtimes import standard_runtimes
from .staging import Stager

LOGGER = logging.getLogger(__name__)

# Keeps long start commands on a single YAML line.
RELEASE_LINE_WIDTH = 1 << 16


def read_release(build_dir: Path) -> str:
    """Return the release descriptor YAML that finalize wrote into ``build_dir``.

    Raises:
        MissingPriorStateError: If finalize has not written a descriptor.
    """

    path = build_dir / RELEASE_DESCRIPTOR_PATH
    if not path.is_file():
        raise MissingPriorStateError(f"finalize has not completed: no release descriptor at {path}")
    return path.read_text(encoding="utf-8")


class Phase(str, Enum):
    """Lifecycle state, derived from the files each phase leaves behind."""

    NOT_STARTED = "not-started"
    SUPPLIED = "supplied"
    FINALIZED = "finalized"


class Lifecycle:
    """Run supply and finalize against one dependency slot.

    Supply and finalize may run in different processes. Supply records what it
    detected in a marker file; finalize re-runs detection and refuses to proceed
    unless it reaches the same answer.
    """

    def __init__(
        self,
        context: ProviderContext,
        *,
        containers: ContainerRegistry | None = None,
        runtimes: RuntimeRegistry | None = None,
        agents: AgentRegistry | None = None,
    ) -> None:
        """Wire the lifecycle to ``context`` and its provider registries.

        Args:
            context: Shared staging context.
            containers: Container registry; the standard one when omitted.
            runtimes: Runtime registry; the standard one when omitted.
            agents: Agent registry; the standard one when omitted.

        """

        self._context = context
        self._containers = containers if containers is not None else standard_containers(context)
        self._runtimes = runtimes if runtimes is not None else standard_runtimes(context)
        self._agents = agents if agents is not None else standard_agents(context)

    @classmethod
    def create(
        cls,
        build_dir: Path,
        cache_dir: Path,
        deps_dir: Path,
        deps_idx: str = "0",
        *,
        environ: Mapping[str, str] | None = None,
        catalog: DependencyCatalog | None = None,
        installer: DependencyInstaller | None = None,
        log: BuildLog | None = None,
    ) -> Lifecycle:
        """Build a lifecycle wired with the bundled catalog and the download installer."""

        config = ConfigSnapshot.from_environ(environ)
        stager = Stager(build_dir=build_dir, cache_dir=cache_dir, deps_dir=deps_dir, deps_idx=deps_idx)
        context = ProviderContext(
            stager=stager,
            catalog=catalog or DependencyCatalog.bundled(stack=config.get("CF_STACK")),
            installer=installer or ArchiveInstaller(cache_dir),
            config=config,
            log=log or BuildLog(debug=config.debug),
        )
        return cls(context)

    @property
    def context(self) -> ProviderContext:
        """Return the shared staging context."""

        return self._context

    @property
    def stager(self) -> Stager:
        """Return the stager of the dependency slot."""

        return self._context.stager

    @property
    def log(self) -> BuildLog:
        """Return the build log."""

        return self._context.log

    def phase(self) -> Phase:
        """Return how far staging has progressed in this slot."""

        if not self.stager.marker_path.is_file():
            return Phase.NOT_STARTED
        if self.stager.release_path.is_file():
            return Phase.FINALIZED
        return Phase.SUPPLIED

    def read_record(self) -> SupplyRecord | None:
        """Return the supply marker, or ``None`` when supply has not completed.

        Raises:
            MissingPriorStateError: If the marker exists but cannot be parsed.
        """

        path = self.stager.marker_path
        if not path.is_file():
            return None
        try:
            return SupplyRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            raise MissingPriorStateError(f"supply marker {path} is unreadable: {exc}") from exc

    def supply(self) -> SupplyRecord:
        """Detect and install everything the application needs.

        The marker is removed first and only written back once the container,
        the runtime and every agent have been handled, so a failed supply can be
        re-run and finalize never sees a half-finished slot as complete. Scripts
        and option fragments left by an earlier run are cleared as well, so only
        the providers detected now contribute to the start command.
        """

        self.stager.ensure_layout()
        self.stager.marker_path.unlink(missing_ok=True)
        self.stager.release_path.unlink(missing_ok=True)
        self.stager.clear_generated()

        container, container_outcome = self._containers.select()
        runtime, runtime_outcome = self._runtimes.select()
        detected_agents = [agent for agent, _ in self._agents.select_all()]
        self.log.begin_step("Detected %s on %s", container_outcome.identifier, runtime_outcome.identifier)

        runtime.supply()
        supplied = self._agents.supply_each(detected_agents)
        container.supply()

        record = SupplyRecord(
            container=container.name,
            container_identifier=container_outcome.identifier or container.name,
            runtime=runtime.name,
            runtime_identifier=runtime_outcome.identifier or runtime.name,
            runtime_version=runtime.version,
            java_home=str(runtime.java_home) if runtime.java_home else None,
            agents=[agent.name for agent in supplied],
            skipped_agents=[agent.name for agent in detected_agents if agent not in supplied],
        )
        self.stager.marker_path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        LOGGER.debug("wrote supply marker %s", self.stager.marker_path)
        return record

    def finalize(self) -> ReleaseDescriptor:
        """Configure what supply installed and write the release descriptor.

        Raises:
            MissingPriorStateError: If supply has not completed or detection no
                longer matches what supply recorded.
        """

        record = self.read_record()
        if record is None:
            raise MissingPriorStateError(f"supply has not completed: no marker at {self.stager.marker_path}")

        container, container_outcome = self._containers.select()
        runtime, runtime_outcome = self._runtimes.select()
        detected_agents = [agent for agent, _ in self._agents.select_all()]
        self._verify(record, container.name, container_outcome.identifier, runtime.name, detected_agents)

        runtime.finalize()
        supplied = [agent for agent in detected_agents if agent.name in record.agents]
        self._agents.finalize_each(supplied)
        OptionsAssembler(self.stager).write_script()
        container.finalize()

        start_command = container.release()
        if not start_command:
            raise ConfigurationError(f"container '{container.name}' produced no start command")
        descriptor = ReleaseDescriptor(start_command=start_command, memory_calculation_prefix=runtime.release())
        self._write_release(descriptor)
        self.log.info("Start command: %s", descriptor.web_command)
        return descriptor

    def release(self) -> str:
        """Return the release descriptor written by finalize as YAML text.

        Raises:
            MissingPriorStateError: If finalize has not written a descriptor.
        """

        return read_release(self.stager.build_dir)

    def _verify(
        self,
        record: SupplyRecord,
        container: str,
        container_identifier: str | None,
        runtime: str,
        agents: list[AgentProvider],
    ) -> None:
        """Check that finalize detected what supply recorded.

        Raises:
            MissingPriorStateError: If the container, runtime or agent set differs.

        """

        mismatches: list[str] = []
        if record.container != container or record.container_identifier != (container_identifier or container):
            mismatches.append(
                f"container: supplied {record.container} ({record.container_identifier}), "
                f"now {container} ({container_identifier})"
            )
        if record.runtime != runtime:
            mismatches.append(f"runtime: supplied {record.runtime}, now {runtime}")
        expected_agents = sorted(record.agents + record.skipped_agents)
        detected_agents = sorted(agent.name for agent in agents)
        if expected_agents != detected_agents:
            mismatches.append(f"agents: supplied {expected_agents}, now {detected_agents}")
        if mismatches:
            raise MissingPriorStateError(
                "detection changed between supply and finalize; " + "; ".join(mismatches)
            )

    def _write_release(self, descriptor: ReleaseDescriptor) -> Path:
        """Write ``descriptor`` as YAML to the slot release file."""

        path = self.stager.release_path
        path.parent.mkdir(parents=True, exist_ok=True)
        document = yaml.safe_dump(descriptor.to_document(), default_flow_style=False, width=RELEASE_LINE_WIDTH)
        path.write_text(document, encoding="utf-8")
        return path


__all__ = ["Lifecycle", "Phase", "read_release"]
