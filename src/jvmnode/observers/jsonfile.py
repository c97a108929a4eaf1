# src/jvmnode/observers/jsonfile.py
from __future__ import annotations
import json
import os
from pathlib import Path
from .events import BaseEvent


class JsonFileObserver:
    """Appends one JSON line per event; the file survives role restarts."""

    def __init__(self, path: str | Path, *, fsync: bool = False):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.fsync = fsync

    def notify(self, event: BaseEvent) -> None:
        line = json.dumps({"type": event.__class__.__name__, **event.dict()}, default=str)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
            if self.fsync:
                f.flush()
                os.fsync(f.fileno())
