# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/log4j/appenders.py

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Union

from ..errors import ConstructionError

DEFAULT_CONVERSION_PATTERN = "[%d] %p %m (%c)%n"

_INVALID_NAME = re.compile(r"[,=:\s]")

PathLike = Union[str, "os.PathLike[str]"]


def _require(value, what: str):
    if value is None:
        raise ConstructionError(f"{what} is required")
    return value


def _normalize_path(value: PathLike, what: str) -> str:
    _require(value, what)
    text = os.fspath(value)
    if not text:
        raise ConstructionError(f"{what} must not be empty")
    return text.replace("\\", "/")


@dataclass(frozen=True)
class PatternLayout:
    conversion_pattern: str = DEFAULT_CONVERSION_PATTERN

    kind: ClassVar[str] = "org.apache.log4j.PatternLayout"

    def __post_init__(self):
        _require(self.conversion_pattern, "conversion pattern")

    def properties(self, prefix: str) -> Dict[str, str]:
        return {
            f"{prefix}.layout": self.kind,
            f"{prefix}.layout.ConversionPattern": self.conversion_pattern,
        }


@dataclass(frozen=True)
class AppenderDefinition:
    """
    A named log4j appender.

    The name is the lookup key inside one log4j.properties document and is
    embedded verbatim in every logger definition line that references it.
    """

    name: str

    kind: ClassVar[str] = ""

    def __post_init__(self):
        _require(self.name, "appender name")
        if not isinstance(self.name, str) or not self.name or _INVALID_NAME.search(self.name):
            raise ConstructionError(f"Invalid appender name '{self.name}'")

    @property
    def prefix(self) -> str:
        return f"log4j.appender.{self.name}"

    def settings(self) -> Dict[str, str]:
        return {}

    @property
    def full_log4j_properties(self) -> Dict[str, str]:
        props = {self.prefix: self.kind}
        for key, value in self.settings().items():
            props[f"{self.prefix}.{key}"] = value
        layout = getattr(self, "layout", None)
        if layout is not None:
            props.update(layout.properties(self.prefix))
        return props


@dataclass(frozen=True)
class ConsoleAppender(AppenderDefinition):
    layout: PatternLayout = field(default_factory=PatternLayout)
    target: str = "System.out"

    kind: ClassVar[str] = "org.apache.log4j.ConsoleAppender"

    def __post_init__(self):
        super().__post_init__()
        _require(self.layout, "layout")
        if self.target not in ("System.out", "System.err"):
            raise ConstructionError(f"Invalid console target '{self.target}'")

    def settings(self) -> Dict[str, str]:
        return {"Target": self.target}


@dataclass(frozen=True)
class RollingFileAppender(AppenderDefinition):
    file: str
    layout: PatternLayout = field(default_factory=PatternLayout)
    max_file_size: str = "10MB"
    max_backup_index: int = 10

    kind: ClassVar[str] = "org.apache.log4j.RollingFileAppender"

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "file", _normalize_path(self.file, "appender file"))
        _require(self.layout, "layout")
        if self.max_backup_index < 0:
            raise ConstructionError("max_backup_index must not be negative")

    def settings(self) -> Dict[str, str]:
        return {
            "File": self.file,
            "MaxFileSize": self.max_file_size,
            "MaxBackupIndex": str(self.max_backup_index),
        }


@dataclass(frozen=True)
class DailyRollingFileAppender(AppenderDefinition):
    file: str
    layout: PatternLayout = field(default_factory=PatternLayout)
    date_pattern: str = "'.'yyyy-MM-dd-HH"

    kind: ClassVar[str] = "org.apache.log4j.DailyRollingFileAppender"

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "file", _normalize_path(self.file, "appender file"))
        _require(self.layout, "layout")
        _require(self.date_pattern, "date pattern")

    def settings(self) -> Dict[str, str]:
        return {
            "DatePattern": self.date_pattern,
            "File": self.file,
        }
