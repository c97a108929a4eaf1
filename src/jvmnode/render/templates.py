# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/render/templates.py

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound, UndefinedError

from ..errors import FormatError
from .sink import Sink, open_sink

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def _environment(root: Path) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(root)),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_template(name: str, context: Dict[str, Any], templates_dir: Optional[Path] = None) -> str:
    env = _environment(templates_dir or TEMPLATES_DIR)
    try:
        return env.get_template(name).render(**context)
    except TemplateNotFound as e:
        raise FormatError(f"Template not found: {name}") from e
    except UndefinedError as e:
        raise FormatError(f"Template '{name}' is missing a value: {e}") from e


def write_template(name: str, context: Dict[str, Any], sink: Sink, templates_dir: Optional[Path] = None) -> None:
    text = render_template(name, context, templates_dir)
    with open_sink(sink) as f:
        f.write(text)
