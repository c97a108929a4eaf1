# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/log4j/loggers.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Protocol, Tuple, runtime_checkable

from ..errors import ConstructionError, FormatError
from .appenders import AppenderDefinition
from .levels import Log4jTraceLevel


@runtime_checkable
class LoggerDefinition(Protocol):
    """
    What every log4j logger exposes: a level, its ordered appenders, the
    canonical definition line and the properties describing it.
    """

    level: Log4jTraceLevel
    appenders: Tuple[AppenderDefinition, ...]

    @property
    def definition_line(self) -> str: ...

    @property
    def full_log4j_properties(self) -> Dict[str, str]: ...


def _freeze_appenders(appenders: Iterable[AppenderDefinition]) -> Tuple[AppenderDefinition, ...]:
    if appenders is None:
        raise ConstructionError("appenders are required")
    frozen = tuple(appenders)
    for appender in frozen:
        if appender is None:
            raise ConstructionError("appender reference must not be None")
        if not isinstance(appender, AppenderDefinition):
            raise ConstructionError(f"Not an appender definition: {appender!r}")
    return frozen


def definition_line(level: Log4jTraceLevel, appenders: Iterable[AppenderDefinition]) -> str:
    """``LEVEL,appender1,appender2`` with no spaces, in appender order."""
    return ",".join([level.name] + [a.name for a in appenders])


def _check_emits(logger_key: str, level: Log4jTraceLevel, appenders: Tuple[AppenderDefinition, ...]) -> None:
    if level is not Log4jTraceLevel.OFF and not appenders:
        raise FormatError(f"{logger_key} is at level {level.name} but has no appenders")


@dataclass(frozen=True)
class RootLoggerDefinition:
    level: Log4jTraceLevel
    appenders: Tuple[AppenderDefinition, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "level", Log4jTraceLevel.parse(self.level))
        object.__setattr__(self, "appenders", _freeze_appenders(self.appenders))

    @property
    def key(self) -> str:
        return "log4j.rootLogger"

    @property
    def definition_line(self) -> str:
        return definition_line(self.level, self.appenders)

    @property
    def full_log4j_properties(self) -> Dict[str, str]:
        _check_emits(self.key, self.level, self.appenders)
        return {self.key: self.definition_line}


@dataclass(frozen=True)
class NamedLoggerDefinition:
    name: str
    level: Log4jTraceLevel
    appenders: Tuple[AppenderDefinition, ...] = ()
    additivity: bool = True

    def __post_init__(self):
        if not self.name:
            raise ConstructionError("logger name is required")
        object.__setattr__(self, "level", Log4jTraceLevel.parse(self.level))
        object.__setattr__(self, "appenders", _freeze_appenders(self.appenders))

    @property
    def key(self) -> str:
        return f"log4j.logger.{self.name}"

    @property
    def definition_line(self) -> str:
        return definition_line(self.level, self.appenders)

    @property
    def full_log4j_properties(self) -> Dict[str, str]:
        _check_emits(self.key, self.level, self.appenders)
        props = {self.key: self.definition_line}
        if not self.additivity:
            props[f"log4j.additivity.{self.name}"] = "false"
        return props
