# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/diagnostics/capture.py

from __future__ import annotations

import logging
import traceback
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional, Union

from ..observers.dispatcher import EventBus
from ..observers.events import DiagnosticFailed, DiagnosticPersisted, NodeFailed, new_ctx
from .sink import DiagnosticSink, diagnostic_name

log = logging.getLogger("jvmnode")


def format_failure(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def _emit(bus: Optional[EventBus], event_type: type, run_ctx: dict, **fields: Any) -> None:
    # reporting must never replace the failure being reported
    if bus is None:
        return
    try:
        bus.emit(event_type(**fields, **run_ctx))
    except Exception:
        log.debug("could not emit %s", event_type.__name__, exc_info=True)


def persist_failure(
    exc: BaseException,
    *,
    instance_id: str,
    resolve_sink: Callable[[], DiagnosticSink],
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> Optional[str]:
    """
    Write one failure record. Returns its name, or None when the sink could
    not be reached; sink errors are logged and never raised.
    """
    run_ctx = run_ctx or new_ctx(role="node", instance_id=instance_id)
    name = "<unnamed>"
    try:
        name = diagnostic_name(instance_id, (now or (lambda: datetime.now(timezone.utc)))())
        sink = resolve_sink()
        sink.write_failure(name, format_failure(exc))
    except Exception as sink_exc:
        log.error("Failed to persist diagnostic %s: %s", name, sink_exc)
        _emit(bus, DiagnosticFailed, run_ctx, error=str(sink_exc))
        return None

    log.info("Diagnostic persisted as %s", name)
    _emit(bus, DiagnosticPersisted, run_ctx, name=name)
    return name


@contextmanager
def capture_failures(
    phase: Union[str, Callable[[], str]],
    *,
    instance_id: str,
    resolve_sink: Callable[[], DiagnosticSink],
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> Iterator[None]:
    """
    Persist a diagnostic record for any exception raised in the block, then
    re-raise that same exception to the caller.
    """
    try:
        yield
    except Exception as exc:
        label = phase() if callable(phase) else phase
        log.error("%s failed: %s", label, exc)
        run_ctx = run_ctx or new_ctx(role="node", instance_id=instance_id)
        _emit(bus, NodeFailed, run_ctx, phase=label, error=f"{type(exc).__name__}: {exc}")
        persist_failure(
            exc,
            instance_id=instance_id,
            resolve_sink=resolve_sink,
            bus=bus,
            run_ctx=run_ctx,
            now=now,
        )
        raise
