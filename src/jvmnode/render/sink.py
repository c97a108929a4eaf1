# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/render/sink.py

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO, Union

Sink = Union[str, "os.PathLike[str]", TextIO]


@contextmanager
def open_sink(sink: Sink) -> Iterator[TextIO]:
    """
    Yield a text writer for *sink*.

    Writers are used as-is and left open. Paths are opened as UTF-8 with
    ``\\n`` line endings on every platform, creating parent directories.
    """
    if hasattr(sink, "write"):
        yield sink  # type: ignore[misc]
        return

    path = Path(sink)  # type: ignore[arg-type]
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as f:
        yield f
