# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/execution/runner.py

from __future__ import annotations

import logging
import os
import subprocess
import sys
import time
from pathlib import Path
from typing import IO, Dict, List, Mapping, Optional, Sequence, Union

from ..errors import ProcessFailure
from ..observers.dispatcher import EventBus
from ..observers.events import ProcessExited, ProcessLaunched, new_ctx
from .context import ExecutionContext

log = logging.getLogger("jvmnode")

PathLike = Union[str, "os.PathLike[str]"]


def class_path_for_jars_in_directories(*directories: PathLike) -> List[Path]:
    """
    Every ``*.jar`` below each directory, directories in the order given.

    Within one directory jars are sorted by their relative path so the
    classpath (and therefore which duplicate class wins) does not depend on
    the file system's listing order.
    """
    entries: List[Path] = []
    for directory in directories:
        root = Path(directory)
        jars = [p for p in root.rglob("*") if p.is_file() and p.suffix.lower() == ".jar"]
        jars.sort(key=lambda p: p.relative_to(root).as_posix())
        entries.extend(p.resolve() for p in jars)
    return entries


def format_define(name: str, value: object) -> str:
    return f"-D{name}={value}"


class JavaProcess:
    """Handle on a launched JVM."""

    def __init__(
        self,
        main_class: str,
        argv: List[str],
        popen: Optional[subprocess.Popen] = None,
        *,
        output: Optional[IO] = None,
        bus: Optional[EventBus] = None,
        run_ctx: Optional[dict] = None,
    ):
        self.main_class = main_class
        self.argv = argv
        self._popen = popen
        self._output = output
        self._bus = bus
        self._run_ctx = run_ctx
        self.returncode: Optional[int] = None if popen is not None else 0

    @property
    def pid(self) -> Optional[int]:
        return self._popen.pid if self._popen is not None else None

    def poll(self) -> Optional[int]:
        if self._popen is not None:
            self.returncode = self._popen.poll()
        return self.returncode

    def wait(self, check: bool = True) -> int:
        """
        Block until the JVM exits. There is no timeout: a service JVM is
        expected to run for the lifetime of the node.
        """
        start = time.time()
        try:
            if self._popen is not None:
                self.returncode = self._popen.wait()
        finally:
            if self._output is not None:
                self._output.close()
                self._output = None

        rc = self.returncode
        log.info("[java] %s exited with %s after %.1fs", self.main_class, rc, time.time() - start)
        if self._bus is not None:
            self._bus.emit(ProcessExited(main_class=self.main_class, exit_code=rc, **self._run_ctx))

        if check and rc != 0:
            raise ProcessFailure(f"{self.main_class} exited with code {rc}", exit_code=rc)
        return rc

    def terminate(self) -> None:
        if self._popen is not None and self._popen.poll() is None:
            log.info("[java] terminating %s (pid %s)", self.main_class, self.pid)
            self._popen.terminate()


class JavaRunner:
    """
    Starts JVM processes from an installed Java home.

    Argument order is fixed: JVM options, ``-D`` defines, ``-cp``, the main
    class, then the program arguments.
    """

    def __init__(
        self,
        java_home: PathLike,
        *,
        ctx: Optional[ExecutionContext] = None,
        bus: Optional[EventBus] = None,
        run_ctx: Optional[dict] = None,
    ):
        self.java_home = Path(java_home)
        self.ctx = ctx or ExecutionContext()
        self.bus = bus or EventBus()
        self.run_ctx = run_ctx or new_ctx(role="java", instance_id=None)

    @property
    def java_executable(self) -> Path:
        name = "java.exe" if sys.platform.startswith("win") else "java"
        return self.java_home / "bin" / name

    def build_command(
        self,
        main_class: str,
        *args: PathLike,
        class_path_entries: Sequence[PathLike] = (),
        defines: Optional[Mapping[str, object]] = None,
        jvm_options: Sequence[str] = (),
    ) -> List[str]:
        if not main_class:
            raise ValueError("main class is required")

        cmd = [str(self.java_executable)]
        cmd.extend(jvm_options)
        cmd.extend(format_define(k, v) for k, v in (defines or {}).items())
        if class_path_entries:
            cmd += ["-cp", os.pathsep.join(os.fspath(p) for p in class_path_entries)]
        cmd.append(main_class)
        cmd.extend(os.fspath(a) for a in args)
        return cmd

    def start_class(
        self,
        main_class: str,
        *args: PathLike,
        class_path_entries: Sequence[PathLike] = (),
        defines: Optional[Mapping[str, object]] = None,
        jvm_options: Sequence[str] = (),
        environment: Optional[Mapping[str, str]] = None,
        cwd: Optional[PathLike] = None,
        output_path: Optional[PathLike] = None,
    ) -> JavaProcess:
        """Start the JVM and return immediately with a handle to wait on."""
        cmd = self.build_command(
            main_class,
            *args,
            class_path_entries=class_path_entries,
            defines=defines,
            jvm_options=jvm_options,
        )
        log.info("[java] $ %s", " ".join(cmd))

        if self.ctx.dry_run:
            log.info("[java] dry-run: skipped execution")
            self.bus.emit(ProcessLaunched(main_class=main_class, pid=None, argv=cmd, **self.run_ctx))
            return JavaProcess(main_class, cmd, None, bus=self.bus, run_ctx=self.run_ctx)

        if not self.java_executable.is_file():
            raise ProcessFailure(f"Java executable not found: {self.java_executable}")

        env: Optional[Dict[str, str]] = None
        if environment:
            env = os.environ.copy()
            env.update(environment)

        output = None
        if output_path is not None:
            Path(output_path).parent.mkdir(parents=True, exist_ok=True)
            output = open(output_path, "ab")

        try:
            popen = subprocess.Popen(
                cmd,
                cwd=os.fspath(cwd) if cwd is not None else None,
                env=env,
                stdout=output,
                stderr=subprocess.STDOUT if output is not None else None,
            )
        except OSError as e:
            if output is not None:
                output.close()
            raise ProcessFailure(f"Failed to start {main_class}: {e}") from e

        log.info("[java] started %s (pid %s)", main_class, popen.pid)
        self.bus.emit(ProcessLaunched(main_class=main_class, pid=popen.pid, argv=cmd, **self.run_ctx))
        return JavaProcess(main_class, cmd, popen, output=output, bus=self.bus, run_ctx=self.run_ctx)

    def run_class(self, main_class: str, *args: PathLike, **kwargs) -> int:
        """Start the JVM and block until it exits; non-zero exit raises ProcessFailure."""
        return self.start_class(main_class, *args, **kwargs).wait(check=True)
