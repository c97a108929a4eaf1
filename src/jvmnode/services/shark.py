# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/services/shark.py

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..errors import ConstructionError
from ..execution.context import ExecutionContext
from ..execution.runner import JavaProcess, JavaRunner, class_path_for_jars_in_directories
from ..render.sink import Sink
from ..render.templates import write_template

log = logging.getLogger("jvmnode")

CLI_CLASS = "shark.SharkCliDriver"
SERVER_CLASS = "shark.SharkServer"

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class SharkConfig:
    server_port: int
    metastore_uris: str
    spark_home: str
    spark_master: str
    spark_memory_mb: int = 1024

    def __post_init__(self):
        for name in ("server_port", "metastore_uris", "spark_home", "spark_master"):
            if getattr(self, name) in (None, ""):
                raise ConstructionError(f"Shark {name} is required")
        object.__setattr__(self, "spark_home", os.fspath(self.spark_home).replace("\\", "/"))
        if self.spark_memory_mb <= 0:
            raise ConstructionError("spark_memory_mb must be positive")

    def environment(self) -> Dict[str, str]:
        return {
            "SPARK_HOME": self.spark_home,
            "MASTER": self.spark_master,
            "SPARK_MEM": f"{self.spark_memory_mb}m",
            "SHARK_MASTER_MEM": f"{self.spark_memory_mb}m",
        }

    def write_env_script(self, writer: Sink) -> None:
        """Write shark-env.sh for operators starting Shark by hand."""
        write_template(
            "shark-env.sh.j2",
            {
                "spark_home": self.spark_home,
                "spark_master": self.spark_master,
                "spark_memory_mb": self.spark_memory_mb,
                "metastore_uris": self.metastore_uris,
            },
            writer,
        )


class SharkRunner:
    """Starts the Shark CLI or Shark server against a Spark master."""

    def __init__(
        self,
        shark_home: PathLike,
        java_home: PathLike,
        config: SharkConfig,
        *,
        ctx: Optional[ExecutionContext] = None,
    ):
        self.shark_home = Path(shark_home)
        self.config = config
        self.runner = JavaRunner(java_home, ctx=ctx)

    @property
    def env_script_path(self) -> Path:
        return self.shark_home / "conf" / "shark-env.sh"

    def class_path(self) -> List[Path]:
        entries: List[Path] = [self.shark_home / "conf"]
        entries += class_path_for_jars_in_directories(self.shark_home / "lib")
        spark_jars = Path(self.config.spark_home) / "jars"
        if spark_jars.is_dir():
            entries += class_path_for_jars_in_directories(spark_jars)
        return entries

    def _start(self, main_class: str, *args: str) -> JavaProcess:
        self.config.write_env_script(self.env_script_path)
        log.info("[shark] wrote %s", self.env_script_path)
        return self.runner.start_class(
            main_class,
            *args,
            class_path_entries=self.class_path(),
            jvm_options=[f"-Xmx{self.config.spark_memory_mb}m"],
            defines={
                "hive.metastore.uris": self.config.metastore_uris,
                "shark.home": self.shark_home,
            },
            environment=self.config.environment(),
        )

    def run_shark_cli(self) -> JavaProcess:
        return self._start(CLI_CLASS)

    def run_shark_server(self) -> JavaProcess:
        return self._start(SERVER_CLASS, "-p", str(self.config.server_port))
