# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/roles/storm.py

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..errors import ConstructionError
from ..execution.context import ExecutionContext
from ..execution.runner import JavaRunner, class_path_for_jars_in_directories
from ..host.runtime import HostRuntime
from ..host.settings import ArtifactSettings
from ..log4j.factory import storm_log4j_config
from ..observers.dispatcher import EventBus
from ..services.storm import DAEMON_CLASSES, DEFAULT_ZOOKEEPER_PORT, StormConfig
from .base import JavaServiceRole


class StormRole(JavaServiceRole):
    """One Storm daemon (nimbus, supervisor, ui or drpc) on this node."""

    def __init__(
        self,
        host: HostRuntime,
        artifacts: ArtifactSettings,
        daemon: str,
        *,
        bus: Optional[EventBus] = None,
        ctx: Optional[ExecutionContext] = None,
        sink=None,
        run_id: Optional[str] = None,
    ):
        if daemon not in DAEMON_CLASSES:
            raise ConstructionError(
                f"Unknown Storm daemon '{daemon}', expected one of {', '.join(DAEMON_CLASSES)}"
            )
        self.daemon = daemon
        self.role_name = f"storm-{daemon}"
        super().__init__(host, artifacts, bus=bus, ctx=ctx, sink=sink, run_id=run_id)

    @property
    def storm_yaml_path(self) -> Path:
        return self.paths.configs_directory / "storm.yaml"

    @property
    def log4j_properties_path(self) -> Path:
        return self.paths.configs_directory / "log4j.properties"

    def storm_config(self) -> StormConfig:
        return StormConfig(
            nimbus_host=self.setting("Storm.NimbusHost"),
            zookeeper_servers=self.list_setting("Storm.ZooKeeperServers"),
            zookeeper_port=self.int_setting("Storm.ZooKeeperPort", DEFAULT_ZOOKEEPER_PORT),
            drpc_servers=self.list_setting("Storm.DrpcServers", ""),
            max_node_memory_mb=self.int_setting("Storm.MaxNodeMemoryMb", 2048),
            storm_local_directory=str(self.paths.data_directory),
        )

    def write_config_files(self) -> None:
        self.storm_config().write_to_yaml_file(self.storm_yaml_path)
        self.config_written(self.storm_yaml_path, "yaml")

        log4j = storm_log4j_config(self.paths.logs_directory, self.daemon)
        self.write_properties(log4j.to_properties_file(), self.log4j_properties_path)

    def launch(self, runner: JavaRunner) -> None:
        config = self.storm_config()
        class_path = [self.paths.configs_directory]
        class_path += class_path_for_jars_in_directories(self.paths.jars_home)

        runner.run_class(
            DAEMON_CLASSES[self.daemon],
            class_path_entries=class_path,
            jvm_options=[f"-Xmx{config.max_node_memory_mb}m"],
            defines={
                "storm.home": self.paths.jars_home,
                "storm.conf.file": self.storm_yaml_path.name,
                "storm.log.dir": self.paths.logs_directory,
                "logfile.name": f"{self.daemon}.log",
                "log4j.configuration": self.log4j_properties_path.as_uri(),
            },
        )
