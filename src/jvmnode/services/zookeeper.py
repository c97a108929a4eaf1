# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/services/zookeeper.py

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple, Union

from ..errors import ConstructionError
from ..render.properties import PropertiesFile

QUORUM_PORT = 2888
ELECTION_PORT = 3888


@dataclass(frozen=True)
class ZookeeperConfig:
    """
    zookeeper.properties for a standalone server, or a quorum member when
    ``servers`` lists the ensemble (server ids are 1-based, in list order).
    """

    data_directory: Union[str, "os.PathLike[str]"]
    client_port: int = 2181
    tick_time_ms: int = 2000
    init_limit: int = 5
    sync_limit: int = 2
    max_client_connections: int = 0
    servers: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.data_directory is None:
            raise ConstructionError("data directory is required")
        object.__setattr__(self, "data_directory", os.fspath(self.data_directory).replace("\\", "/"))
        if self.servers is None:
            raise ConstructionError("servers must be a sequence, not None")
        servers = tuple(self.servers)
        if any(not s for s in servers):
            raise ConstructionError("quorum server names must not be empty")
        object.__setattr__(self, "servers", servers)
        if not 0 < self.client_port < 65536:
            raise ConstructionError(f"Invalid client port {self.client_port}")

    def to_properties_file(self) -> PropertiesFile:
        entries = [
            ("dataDir", self.data_directory),
            ("clientPort", self.client_port),
            ("maxClientCnxns", self.max_client_connections),
        ]
        if self.servers:
            entries += [
                ("tickTime", self.tick_time_ms),
                ("initLimit", self.init_limit),
                ("syncLimit", self.sync_limit),
            ]
            entries += [
                (f"server.{i}", f"{host}:{QUORUM_PORT}:{ELECTION_PORT}")
                for i, host in enumerate(self.servers, start=1)
            ]
        return PropertiesFile(entries)
