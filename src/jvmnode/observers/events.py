# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/observers/events.py

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str                     # ISO timestamp
    run_id: str                 # correlates all events of one node lifetime
    role: str                   # zookeeper / storm-nimbus / ...
    instance_id: Optional[str]  # host runtime instance id

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def now_ts() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def new_ctx(role: str, instance_id: Optional[str], run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": now_ts(),
        "run_id": run_id or str(uuid.uuid4()),
        "role": role,
        "instance_id": instance_id,
    }


# ---------------------------------------------------------------------
# Lifecycle phases
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class PhaseStarted(BaseEvent):
    phase: str

@dataclass(frozen=True)
class PhaseCompleted(BaseEvent):
    phase: str
    duration_ms: int

@dataclass(frozen=True)
class NodeFailed(BaseEvent):
    phase: str
    error: str


# ---------------------------------------------------------------------
# Staging & configuration
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ArtifactExtracted(BaseEvent):
    archive: str
    target: str
    entries: int

@dataclass(frozen=True)
class ConfigWritten(BaseEvent):
    path: str
    kind: str           # "properties" | "yaml" | "template"


# ---------------------------------------------------------------------
# Process lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ProcessLaunched(BaseEvent):
    main_class: str
    pid: Optional[int]
    argv: List[str]

@dataclass(frozen=True)
class ProcessExited(BaseEvent):
    main_class: str
    exit_code: Optional[int]


# ---------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class DiagnosticPersisted(BaseEvent):
    name: str

@dataclass(frozen=True)
class DiagnosticFailed(BaseEvent):
    error: str
