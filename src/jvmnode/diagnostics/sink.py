# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/diagnostics/sink.py

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol
from urllib.parse import quote

import requests

from ..errors import DiagnosticSinkError

log = logging.getLogger("jvmnode")

CONNECTION_STRING_SETTING = "Diagnostics.ConnectionString"
DEFAULT_CONTAINER = "logs"

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class DiagnosticSink(Protocol):
    def write_failure(self, name: str, text: str) -> None: ...


def diagnostic_name(instance_id: str, when: Optional[datetime] = None) -> str:
    """Deterministic record name from the instance identity and a UTC timestamp."""
    when = when or datetime.now(timezone.utc)
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    safe_id = _UNSAFE.sub("_", instance_id or "unknown")
    return f"exception-{safe_id}-{when.strftime('%Y%m%dT%H%M%S.%f')}Z.txt"


class FileDiagnosticSink:
    """Writes each failure record as a text file in a local directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def write_failure(self, name: str, text: str) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # "x": records are write-once
            with (self.directory / name).open("x", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise DiagnosticSinkError(f"Failed to write {name} to {self.directory}: {e}") from e


class BlobDiagnosticSink:
    """
    Uploads failure records as block blobs through the Blob service REST API,
    authenticated with a shared access signature.
    """

    def __init__(
        self,
        blob_endpoint: str,
        sas_token: str,
        container: str = DEFAULT_CONTAINER,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.blob_endpoint = blob_endpoint.rstrip("/")
        self.sas_token = sas_token.lstrip("?")
        self.container = container
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str, query: str = "") -> str:
        q = "&".join(x for x in (query, self.sas_token) if x)
        return f"{self.blob_endpoint}/{path}?{q}"

    def _ensure_container(self) -> None:
        r = self.session.put(
            self._url(self.container, "restype=container"),
            headers={"x-ms-version": "2021-08-06"},
            timeout=self.timeout,
        )
        # 409: already exists. 403: a container-scoped SAS may not create
        # containers; the upload itself will report a missing container.
        if r.status_code == 403:
            log.debug("container create refused for '%s', uploading anyway", self.container)
        elif r.status_code not in (201, 409):
            raise DiagnosticSinkError(
                f"Failed to create container '{self.container}': {r.status_code} {r.text}"
            )

    def write_failure(self, name: str, text: str) -> None:
        try:
            self._ensure_container()
            r = self.session.put(
                self._url(f"{self.container}/{quote(name)}"),
                data=text.encode("utf-8"),
                headers={
                    "x-ms-version": "2021-08-06",
                    "x-ms-blob-type": "BlockBlob",
                    "Content-Type": "text/plain; charset=utf-8",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise DiagnosticSinkError(f"Failed to upload {name}: {e}") from e
        if r.status_code != 201:
            raise DiagnosticSinkError(f"Failed to upload {name}: {r.status_code} {r.text}")


def parse_connection_string(text: str) -> Dict[str, str]:
    parts: Dict[str, str] = {}
    for chunk in (text or "").split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        key, sep, value = chunk.partition("=")
        if not sep:
            raise DiagnosticSinkError(f"Malformed connection string segment '{chunk}'")
        parts[key.strip()] = value.strip()
    return parts


def sink_from_connection_string(text: str) -> DiagnosticSink:
    """
    ``LocalDirectory=/var/log/node`` selects a file sink;
    ``BlobEndpoint=https://...;SharedAccessSignature=sv=...`` selects a blob sink.
    """
    parts = parse_connection_string(text)
    if "LocalDirectory" in parts:
        return FileDiagnosticSink(parts["LocalDirectory"])
    if "BlobEndpoint" in parts and "SharedAccessSignature" in parts:
        return BlobDiagnosticSink(
            parts["BlobEndpoint"],
            parts["SharedAccessSignature"],
            container=parts.get("Container", DEFAULT_CONTAINER),
        )
    raise DiagnosticSinkError(
        "Connection string must define LocalDirectory, or BlobEndpoint and SharedAccessSignature"
    )
