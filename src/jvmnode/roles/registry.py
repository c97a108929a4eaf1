# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/roles/registry.py

from __future__ import annotations

from typing import Optional

from ..execution.context import ExecutionContext
from ..host.runtime import SettingsHostRuntime
from ..host.settings import NodeSettings
from ..observers.dispatcher import EventBus
from .base import JavaServiceRole
from .storm import StormRole
from .zookeeper import ZookeeperRole


def build_role(
    settings: NodeSettings,
    *,
    bus: Optional[EventBus] = None,
    ctx: Optional[ExecutionContext] = None,
    run_id: Optional[str] = None,
) -> JavaServiceRole:
    host = SettingsHostRuntime(settings)
    if settings.role == "zookeeper":
        return ZookeeperRole(host, settings.artifacts, bus=bus, ctx=ctx, run_id=run_id)

    # storm-nimbus -> nimbus
    daemon = settings.role.split("-", 1)[1]
    return StormRole(host, settings.artifacts, daemon, bus=bus, ctx=ctx, run_id=run_id)
