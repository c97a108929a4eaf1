# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/host/runtime.py

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .settings import NodeSettings


class HostRuntime(Protocol):
    """
    The role-hosting runtime as seen by a node: a stable instance id, named
    local storage roots and string configuration settings.
    """

    @property
    def instance_id(self) -> str: ...

    def get_local_resource(self, name: str) -> Path:
        """Root path of a named per-instance local resource. Raises KeyError if undeclared."""
        ...

    def get_setting(self, key: str) -> str:
        """Configuration setting value. Raises KeyError if unset."""
        ...


class SettingsHostRuntime:
    """HostRuntime backed by a NodeSettings file, for running outside a managed host."""

    def __init__(self, settings: NodeSettings):
        self.settings = settings

    @property
    def instance_id(self) -> str:
        return self.settings.instance_id

    def get_local_resource(self, name: str) -> Path:
        try:
            return self.settings.local_resources[name]
        except KeyError:
            raise KeyError(f"Local resource '{name}' is not declared") from None

    def get_setting(self, key: str) -> str:
        try:
            return self.settings.settings[key]
        except KeyError:
            raise KeyError(f"Setting '{key}' is not defined") from None
