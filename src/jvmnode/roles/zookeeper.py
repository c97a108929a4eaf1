# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/roles/zookeeper.py

from __future__ import annotations

from pathlib import Path

from ..errors import ConstructionError
from ..execution.runner import JavaRunner, class_path_for_jars_in_directories
from ..log4j.factory import zookeeper_log4j_config
from ..services.zookeeper import ZookeeperConfig
from .base import JavaServiceRole

MAIN_CLASS = "org.apache.zookeeper.server.quorum.QuorumPeerMain"

SERVERS_SETTING = "Zookeeper.Servers"
MY_ID_SETTING = "Zookeeper.MyId"


class ZookeeperRole(JavaServiceRole):
    """A Zookeeper server, standalone or one member of a quorum."""

    role_name = "zookeeper"

    @property
    def zookeeper_properties_path(self) -> Path:
        return self.paths.configs_directory / "zookeeper.properties"

    @property
    def log4j_properties_path(self) -> Path:
        return self.paths.configs_directory / "log4j.properties"

    def _my_id(self, servers) -> int:
        explicit = self.setting(MY_ID_SETTING, None)
        if explicit is not None:
            my_id = self.int_setting(MY_ID_SETTING)
        elif self.host.instance_id in servers:
            my_id = servers.index(self.host.instance_id) + 1
        else:
            raise ConstructionError(
                f"Instance '{self.host.instance_id}' is not in {SERVERS_SETTING} and {MY_ID_SETTING} is unset"
            )
        if not 1 <= my_id <= len(servers):
            raise ConstructionError(f"{MY_ID_SETTING}={my_id} is outside the quorum of {len(servers)}")
        return my_id

    def write_config_files(self) -> None:
        servers = self.list_setting(SERVERS_SETTING, "")
        config = ZookeeperConfig(self.paths.data_directory, servers=servers)
        self.write_properties(config.to_properties_file(), self.zookeeper_properties_path)

        if servers:
            myid_path = self.paths.data_directory / "myid"
            myid_path.write_text(f"{self._my_id(servers)}\n", encoding="utf-8")
            self.config_written(myid_path, "myid")

        log4j = zookeeper_log4j_config(self.paths.logs_directory)
        self.write_properties(log4j.to_properties_file(), self.log4j_properties_path)

    def launch(self, runner: JavaRunner) -> None:
        runner.run_class(
            MAIN_CLASS,
            self.zookeeper_properties_path,
            class_path_entries=class_path_for_jars_in_directories(self.paths.jars_home),
            defines={"log4j.configuration": self.log4j_properties_path.as_uri()},
        )
