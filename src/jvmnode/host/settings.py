# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/host/settings.py

import logging
import os
import socket
from pathlib import Path
from typing import Annotated, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

log = logging.getLogger("jvmnode")

RoleName = Literal[
    "zookeeper",
    "storm-nimbus",
    "storm-supervisor",
    "storm-ui",
    "storm-drpc",
]


def _setting_str(value):
    # host settings are text; lists become the comma-separated form list settings expect
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return ",".join(str(v) for v in value)
    return value


SettingValue = Annotated[str, BeforeValidator(_setting_str)]


class ArtifactSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    jars_archive: Path          # zip of the service's library jars, or "package:resource"
    jdk_package: Path           # zip/tar of a JDK whose top-level folder is "java"


class NodeSettings(BaseModel):
    """What the host runtime knows about this role instance."""

    model_config = ConfigDict(frozen=True)

    role: RoleName
    instance_id: str = Field(default_factory=socket.gethostname)
    local_resources: Dict[str, Path]
    settings: Dict[str, SettingValue] = Field(default_factory=dict)
    artifacts: ArtifactSettings
    log_dir: Optional[Path] = None


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text(encoding="utf-8")
    expanded = os.path.expandvars(raw)
    return yaml.safe_load(expanded) or {}


def _find_overrides_file(settings_path: Path) -> Optional[Path]:
    """
    Per-instance overrides, in priority order:

    1. JVMNODE_SETTINGS_OVERRIDES environment variable (explicit path)
    2. node.local.yaml next to the settings file
    """
    env = os.environ.get("JVMNODE_SETTINGS_OVERRIDES")
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("JVMNODE_SETTINGS_OVERRIDES=%s does not exist, skipping", env)
        return None

    p = settings_path.parent / "node.local.yaml"
    if p.is_file():
        return p
    return None


def load_settings(path: str | Path) -> NodeSettings:
    """
    Load and validate a node settings file.

    ``${ENV_VAR}`` placeholders are expanded before parsing, and an
    overrides file (see ``_find_overrides_file``) is deep-merged on top
    before pydantic validation.
    """
    path = Path(path)
    data = _load_yaml(path)

    overrides_path = _find_overrides_file(path)
    if overrides_path:
        log.debug("Merging overrides from %s", overrides_path)
        _deep_merge(data, _load_yaml(overrides_path))

    return NodeSettings.model_validate(data)
