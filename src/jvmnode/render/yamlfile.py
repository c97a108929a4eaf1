# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/render/yamlfile.py

from __future__ import annotations

from typing import Any, Mapping

import yaml

from ..errors import FormatError
from .sink import Sink, open_sink


class _FlowListDumper(yaml.SafeDumper):
    """Block-style mappings, flow-style sequences."""


def _represent_list(dumper: yaml.SafeDumper, data: list) -> yaml.Node:
    return dumper.represent_sequence("tag:yaml.org,2002:seq", data, flow_style=True)


_FlowListDumper.add_representer(list, _represent_list)


def _plain(value: Any) -> Any:
    # SafeDumper cannot represent tuples
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def render_yaml_mapping(mapping: Mapping[str, Any]) -> str:
    """
    Dump a single flat mapping, keeping key order. Sequences of scalars are
    written in flow style: ``storm.zookeeper.servers: [z1, z2]``.
    """
    if mapping is None:
        raise FormatError("YAML mapping is required")
    data = {}
    for key, value in mapping.items():
        if value is None:
            raise FormatError(f"Setting '{key}' has no value")
        data[key] = _plain(value)

    return yaml.dump(
        data,
        Dumper=_FlowListDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=4096,
    )


def write_yaml_mapping(mapping: Mapping[str, Any], sink: Sink) -> None:
    text = render_yaml_mapping(mapping)
    with open_sink(sink) as f:
        f.write(text)
