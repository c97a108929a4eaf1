# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/log4j/levels.py

from __future__ import annotations

from enum import IntEnum

from ..errors import ConstructionError


class Log4jTraceLevel(IntEnum):
    """
    log4j 1.x levels, ordered from quietest to most verbose.
    The member name is what ends up in a logger's definition line.
    """

    OFF = 0
    FATAL = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5
    TRACE = 6

    def __str__(self) -> str:
        return self.name

    @classmethod
    def parse(cls, value: "str | Log4jTraceLevel") -> "Log4jTraceLevel":
        if isinstance(value, cls):
            return value
        if value is None:
            raise ConstructionError("trace level is required")
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ConstructionError(f"Unknown log4j level '{value}'") from None
