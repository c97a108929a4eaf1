# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/errors.py

from __future__ import annotations

from typing import Optional


class JvmNodeError(RuntimeError):
    """Base class for node bootstrap failures."""


class ConstructionError(JvmNodeError, ValueError):
    """Raised when a definition is built from missing or invalid inputs."""


class FormatError(JvmNodeError):
    """Raised when a definition cannot be rendered into its target format."""


class StagingError(JvmNodeError):
    """Raised when an archive or runtime package cannot be unpacked."""


class ProcessFailure(JvmNodeError):
    """Raised when the JVM cannot be started or exits non-zero."""

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code


class DiagnosticSinkError(JvmNodeError):
    """Raised when a failure record cannot be persisted."""
