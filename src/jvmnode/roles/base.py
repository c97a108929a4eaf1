# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/roles/base.py

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional

from ..diagnostics.capture import capture_failures
from ..diagnostics.sink import CONNECTION_STRING_SETTING, DiagnosticSink, sink_from_connection_string
from ..errors import ConstructionError
from ..execution.context import ExecutionContext
from ..execution.runner import JavaRunner
from ..host.runtime import HostRuntime
from ..host.settings import ArtifactSettings
from ..observers.dispatcher import EventBus
from ..observers.events import ArtifactExtracted, ConfigWritten, PhaseCompleted, PhaseStarted, new_ctx
from ..render.properties import PropertiesFile
from ..staging.stager import extract_archive, install_jdk, resolve_archive

log = logging.getLogger("jvmnode")

INSTALL_RESOURCE = "InstallDir"
DATA_RESOURCE = "DataDir"

_MISSING = object()


class NodeState(str, Enum):
    UNINITIALIZED = "uninitialized"
    DISCOVERING = "discovering"
    STAGING = "staging"
    CONFIGURING = "configuring"
    READY = "ready"
    RUNNING = "running"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass(frozen=True)
class NodePaths:
    java_install_home: Path
    java_home: Path
    jars_home: Path
    data_directory: Path
    configs_directory: Path
    logs_directory: Path


def discover_paths(host: HostRuntime) -> NodePaths:
    """
    Resolve the node's directories from the host's local resources,
    creating the data, config and log directories when missing.
    """
    install_root = Path(host.get_local_resource(INSTALL_RESOURCE)).resolve()
    data_root = Path(host.get_local_resource(DATA_RESOURCE)).resolve()

    paths = NodePaths(
        java_install_home=install_root / "Java",
        java_home=install_root / "Java" / "java",
        jars_home=install_root / "Jars",
        data_directory=data_root / "Data",
        configs_directory=data_root / "Config",
        logs_directory=data_root / "Logs",
    )
    for directory in (paths.data_directory, paths.configs_directory, paths.logs_directory):
        directory.mkdir(parents=True, exist_ok=True)
    return paths


class JavaServiceRole(ABC):
    """
    Entry point the host runtime drives for one JVM service instance.

    ``on_start`` runs once: discover directories, stage the JDK and jars,
    write config files. ``run`` then launches the service and blocks for the
    life of the node. A failure in either phase is persisted to the
    diagnostic sink and re-raised; restarting is the host's decision.
    """

    role_name: str = "java-service"

    def __init__(
        self,
        host: HostRuntime,
        artifacts: ArtifactSettings,
        *,
        bus: Optional[EventBus] = None,
        ctx: Optional[ExecutionContext] = None,
        sink: Optional[DiagnosticSink] = None,
        run_id: Optional[str] = None,
    ):
        self.host = host
        self.artifacts = artifacts
        self.bus = bus or EventBus()
        self.ctx = ctx or ExecutionContext()
        self._sink = sink
        self.state = NodeState.UNINITIALIZED
        self.paths: Optional[NodePaths] = None
        self.run_ctx = new_ctx(role=self.role_name, instance_id=host.instance_id, run_id=run_id)

    # ------------------ host runtime callbacks ------------------

    def on_start(self) -> bool:
        with self._failure_boundary("start"):
            self._phase(NodeState.DISCOVERING, self.discover_directories)
            self._phase(NodeState.STAGING, self.stage_artifacts)
            # Role environment changes after this point are not re-applied:
            # the files are written once per start from the current settings.
            self._phase(NodeState.CONFIGURING, self.write_config_files)
            self.state = NodeState.READY
        return True

    def run(self) -> None:
        with self._failure_boundary("run"):
            if self.state is not NodeState.READY:
                raise RuntimeError(f"{self.role_name} cannot run from state '{self.state.value}'")
            self.state = NodeState.RUNNING
            runner = JavaRunner(self.paths.java_home, ctx=self.ctx, bus=self.bus, run_ctx=self.run_ctx)
            self.launch(runner)
            self.state = NodeState.STOPPED

    # ------------------ phases ------------------

    def discover_directories(self) -> None:
        self.paths = discover_paths(self.host)
        log.debug("[%s] paths: %s", self.role_name, self.paths)

    def stage_artifacts(self) -> None:
        jars_archive = resolve_archive(self.artifacts.jars_archive)
        entries = extract_archive(jars_archive, self.paths.jars_home)
        self.bus.emit(ArtifactExtracted(
            archive=str(jars_archive),
            target=str(self.paths.jars_home),
            entries=entries,
            **self.run_ctx,
        ))
        install_jdk(resolve_archive(self.artifacts.jdk_package), self.paths.java_install_home)

    @abstractmethod
    def write_config_files(self) -> None:
        """Render the service's config files from the discovered paths and settings."""

    @abstractmethod
    def launch(self, runner: JavaRunner) -> None:
        """Start the service JVM and block until it exits."""

    # ------------------ helpers ------------------

    def setting(self, key: str, default: Any = _MISSING) -> str:
        try:
            return self.host.get_setting(key)
        except KeyError:
            if default is _MISSING:
                raise
            return default

    def list_setting(self, key: str, default: Any = _MISSING) -> List[str]:
        """Comma-separated setting, order preserved, blanks dropped."""
        raw = self.setting(key, default)
        if raw is None or isinstance(raw, list):
            return list(raw or [])
        return [item.strip() for item in raw.split(",") if item.strip()]

    def int_setting(self, key: str, default: Any = _MISSING) -> int:
        raw = self.setting(key, default)
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise ConstructionError(f"Setting '{key}' must be an integer, got {raw!r}") from None

    def write_properties(self, properties: PropertiesFile, path: Path) -> None:
        properties.write_to(path)
        self.config_written(path, "properties")

    def config_written(self, path: Path, kind: str) -> None:
        log.info("[%s] wrote %s", self.role_name, path)
        self.bus.emit(ConfigWritten(path=str(path), kind=kind, **self.run_ctx))

    def resolve_sink(self) -> DiagnosticSink:
        if self._sink is not None:
            return self._sink
        return sink_from_connection_string(self.host.get_setting(CONNECTION_STRING_SETTING))

    def _phase(self, state: NodeState, fn: Callable[[], None]) -> None:
        self.state = state
        self.bus.emit(PhaseStarted(phase=state.value, **self.run_ctx))
        t0 = time.time()
        fn()
        duration_ms = int((time.time() - t0) * 1000)
        self.bus.emit(PhaseCompleted(phase=state.value, duration_ms=duration_ms, **self.run_ctx))

    @contextmanager
    def _failure_boundary(self, callback: str) -> Iterator[None]:
        try:
            with capture_failures(
                lambda: f"{callback}:{self.state.value}",
                instance_id=self.host.instance_id,
                resolve_sink=self.resolve_sink,
                bus=self.bus,
                run_ctx=self.run_ctx,
            ):
                yield
        except Exception:
            self.state = NodeState.FAILED
            raise
