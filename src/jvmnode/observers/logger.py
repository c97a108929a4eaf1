# src/jvmnode/observers/logger.py
from __future__ import annotations
import logging
from .events import BaseEvent, DiagnosticFailed, NodeFailed

_ERROR_EVENTS = (NodeFailed, DiagnosticFailed)


class LoggerObserver:
    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        d = event.dict()
        etype = event.__class__.__name__
        msg = ", ".join(f"{k}={v}" for k, v in d.items() if k not in ("ts", "run_id", "role", "instance_id"))
        level = logging.ERROR if isinstance(event, _ERROR_EVENTS) else logging.INFO

        self.logger.log(level, "[EVENT] %s %s: %s", d["role"], etype, msg)
