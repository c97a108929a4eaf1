# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/log4j/factory.py

from __future__ import annotations

from pathlib import Path

from .appenders import ConsoleAppender, DailyRollingFileAppender, RollingFileAppender
from .config import Log4jConfig
from .levels import Log4jTraceLevel
from .loggers import NamedLoggerDefinition, RootLoggerDefinition


def zookeeper_log4j_config(logs_directory: Path) -> Log4jConfig:
    """
    INFO to stdout. Everything from org.apache.zookeeper goes to an hourly
    rolled zookeeper.log instead.
    """
    stdout = ConsoleAppender("stdout")
    server_log = DailyRollingFileAppender("zookeeperAppender", file=Path(logs_directory) / "zookeeper.log")

    return Log4jConfig(
        root_logger=RootLoggerDefinition(Log4jTraceLevel.INFO, (stdout,)),
        loggers=(
            NamedLoggerDefinition(
                "org.apache.zookeeper",
                Log4jTraceLevel.INFO,
                (server_log,),
                additivity=False,
            ),
        ),
    )


def storm_log4j_config(logs_directory: Path, daemon: str) -> Log4jConfig:
    stdout = ConsoleAppender("stdout")
    daemon_log = RollingFileAppender(
        "daemonAppender",
        file=Path(logs_directory) / f"{daemon}.log",
        max_file_size="100MB",
        max_backup_index=9,
    )

    return Log4jConfig(
        root_logger=RootLoggerDefinition(Log4jTraceLevel.INFO, (stdout, daemon_log)),
        loggers=(
            NamedLoggerDefinition("org.apache.zookeeper", Log4jTraceLevel.WARN, (daemon_log,), additivity=False),
        ),
    )
