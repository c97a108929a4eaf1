# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/render/properties.py

from __future__ import annotations

import re
from typing import Iterable, Iterator, Mapping, Tuple, Union

from ..errors import FormatError
from .sink import Sink, open_sink

_KEY_SPECIALS = re.compile(r"([=:\s])")


def escape_key(key: str) -> str:
    escaped = key.replace("\\", "\\\\")
    escaped = _KEY_SPECIALS.sub(lambda m: "\\" + _whitespace_escape(m.group(1)), escaped)
    # a leading # or ! would turn the line into a comment
    if escaped[:1] in ("#", "!"):
        escaped = "\\" + escaped
    return escaped


def _whitespace_escape(ch: str) -> str:
    return {"\n": "n", "\r": "r", "\t": "t"}.get(ch, ch)


def escape_value(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    # the loader strips leading whitespace from values
    body = escaped.lstrip(" ")
    return "\\ " * (len(escaped) - len(body)) + body


class PropertiesFile:
    """
    An ordered Java properties document.

    Entries keep insertion order so generated files read like the
    hand-written reference configs they replace.
    """

    def __init__(self, entries: Union[Mapping[str, object], Iterable[Tuple[str, object]]]):
        if entries is None:
            raise FormatError("properties entries are required")
        items = entries.items() if isinstance(entries, Mapping) else entries
        self._entries: Tuple[Tuple[str, str], ...] = tuple(
            (self._check_key(k), self._check_value(k, v)) for k, v in items
        )

    @staticmethod
    def _check_key(key) -> str:
        if not isinstance(key, str) or not key:
            raise FormatError(f"Invalid property key {key!r}")
        return key

    @staticmethod
    def _check_value(key: str, value) -> str:
        if value is None:
            raise FormatError(f"Property '{key}' has no value")
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def as_dict(self) -> dict:
        return dict(self._entries)

    def lines(self) -> Iterator[str]:
        for key, value in self._entries:
            yield f"{escape_key(key)}={escape_value(value)}\n"

    def render(self) -> str:
        return "".join(self.lines())

    def write_to(self, sink: Sink) -> None:
        text = self.render()
        with open_sink(sink) as f:
            f.write(text)
