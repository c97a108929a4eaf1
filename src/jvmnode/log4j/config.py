# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/log4j/config.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from ..errors import ConstructionError, FormatError
from ..render.properties import PropertiesFile
from .appenders import AppenderDefinition
from .loggers import NamedLoggerDefinition, RootLoggerDefinition


@dataclass(frozen=True)
class Log4jConfig:
    """
    A complete log4j.properties document: one root logger, any number of
    named loggers, and every appender they reference.
    """

    root_logger: RootLoggerDefinition
    loggers: Tuple[NamedLoggerDefinition, ...] = ()

    def __post_init__(self):
        if self.root_logger is None:
            raise ConstructionError("root logger is required")
        if self.loggers is None:
            raise ConstructionError("named loggers must be a sequence, not None")
        loggers = tuple(self.loggers)
        if any(logger is None for logger in loggers):
            raise ConstructionError("named logger reference must not be None")
        object.__setattr__(self, "loggers", loggers)

    @property
    def appenders(self) -> Tuple[AppenderDefinition, ...]:
        """Distinct appenders in first-reference order."""
        seen: Dict[str, AppenderDefinition] = {}
        for logger in (self.root_logger, *self.loggers):
            for appender in logger.appenders:
                known = seen.get(appender.name)
                if known is None:
                    seen[appender.name] = appender
                elif known != appender:
                    raise FormatError(
                        f"Appender name '{appender.name}' is bound to two different definitions"
                    )
        return tuple(seen.values())

    @property
    def full_log4j_properties(self) -> Dict[str, str]:
        props: Dict[str, str] = {}
        props.update(self.root_logger.full_log4j_properties)
        for logger in self.loggers:
            props.update(logger.full_log4j_properties)
        for appender in self.appenders:
            props.update(appender.full_log4j_properties)
        return props

    def to_properties_file(self) -> PropertiesFile:
        return PropertiesFile(self.full_log4j_properties.items())

