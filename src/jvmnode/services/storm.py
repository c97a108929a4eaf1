# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/services/storm.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from ..errors import ConstructionError
from ..render.sink import Sink
from ..render.yamlfile import write_yaml_mapping

DEFAULT_ZOOKEEPER_PORT = 2181

DAEMON_CLASSES = {
    "nimbus": "backtype.storm.daemon.nimbus",
    "supervisor": "backtype.storm.daemon.supervisor",
    "ui": "backtype.storm.ui.core",
    "drpc": "backtype.storm.daemon.drpc",
}


@dataclass(frozen=True, init=False)
class StormConfig:
    """Configuration for a Storm node."""

    nimbus_host: str
    zookeeper_servers: Tuple[str, ...]
    zookeeper_port: int
    drpc_servers: Tuple[str, ...]
    max_node_memory_mb: int
    storm_local_directory: str

    def __init__(
        self,
        nimbus_host: str,
        zookeeper_servers: Iterable[str],
        zookeeper_port: int = DEFAULT_ZOOKEEPER_PORT,
        drpc_servers: Optional[Iterable[str]] = None,
        max_node_memory_mb: int = 2048,
        storm_local_directory: str = "storm-local",
    ):
        """
        :param nimbus_host: the host where Nimbus is running.
        :param zookeeper_servers: the ZooKeeper hosts, in preference order.
        :param zookeeper_port: the port ZooKeeper nodes are listening on.
        :param drpc_servers: the DRPC servers available to use (None means none).
        :param max_node_memory_mb: maximum memory used by the Storm node.
        :param storm_local_directory: storm.local.dir, where Storm stores its data.
        """
        if not nimbus_host:
            raise ConstructionError("nimbus host is required")
        if zookeeper_servers is None:
            raise ConstructionError("ZooKeeper servers are required")
        servers = tuple(zookeeper_servers)
        if not servers:
            raise ConstructionError("at least one ZooKeeper server is required")
        if storm_local_directory is None:
            raise ConstructionError("storm local directory is required")
        if max_node_memory_mb is None or max_node_memory_mb <= 0:
            raise ConstructionError(f"max_node_memory_mb must be positive, got {max_node_memory_mb}")

        object.__setattr__(self, "nimbus_host", nimbus_host)
        object.__setattr__(self, "zookeeper_servers", servers)
        object.__setattr__(self, "zookeeper_port", zookeeper_port)
        object.__setattr__(self, "drpc_servers", tuple(drpc_servers or ()))
        object.__setattr__(self, "max_node_memory_mb", max_node_memory_mb)
        object.__setattr__(self, "storm_local_directory", str(storm_local_directory))

    def to_yaml_mapping(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "storm.zookeeper.servers": list(self.zookeeper_servers),
            "nimbus.host": self.nimbus_host,
            "storm.local.dir": self.storm_local_directory.replace("\\", "/"),
            "drpc.servers": list(self.drpc_servers),
        }
        if self.zookeeper_port != DEFAULT_ZOOKEEPER_PORT:
            data["storm.zookeeper.port"] = self.zookeeper_port
        return data

    def write_to_yaml_file(self, writer: Sink) -> None:
        """Write out this configuration as storm.yaml."""
        write_yaml_mapping(self.to_yaml_mapping(), writer)
