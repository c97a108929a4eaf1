# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass


@dataclass(frozen=True)
class ExecutionContext:
    """
    controls how child processes are launched
    """

    dry_run: bool = False
