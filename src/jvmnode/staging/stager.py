# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/jvmnode/staging/stager.py

from __future__ import annotations

import logging
import os
import re
import shutil
import stat
import sys
import tarfile
import zipfile
from importlib import resources
from pathlib import Path, PurePosixPath
from typing import Union

from ..errors import StagingError

log = logging.getLogger("jvmnode")

PathLike = Union[str, "os.PathLike[str]"]

JDK_DIR_NAME = "java"

_TAR_SUFFIXES = (".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tar.xz")


def locate_bundled(package: str, resource: str) -> Path:
    """
    Path of an archive shipped as package data (e.g. ``jars.zip`` inside
    ``mycompany.zookeeper.resources``).
    """
    try:
        ref = resources.files(package).joinpath(resource)
    except ModuleNotFoundError as e:
        raise StagingError(f"Bundle package '{package}' is not installed") from e
    if not ref.is_file():
        raise StagingError(f"Bundled archive '{resource}' not found in {package}")
    return Path(os.fspath(ref))


# "package:resource", never a drive letter followed by a separator
_BUNDLE_REF = re.compile(r"^(?P<package>[A-Za-z_][\w.]*):(?P<resource>[^\\/].*)$")


def resolve_archive(reference: PathLike) -> Path:
    """
    Turn an archive reference into a file path. A reference is either a
    path on disk or ``package:resource`` naming an archive bundled with an
    installed package (``mycompany.zookeeper.resources:jars.zip``).
    """
    text = os.fspath(reference)
    path = Path(text)
    if path.exists():
        return path
    m = _BUNDLE_REF.match(text)
    if m:
        return locate_bundled(m.group("package"), m.group("resource"))
    return path


def _inside(root: Path, member: str) -> bool:
    target = (root / member).resolve()
    return target == root or root in target.parents


def extract_archive(archive: PathLike, target_dir: PathLike) -> int:
    """
    Extract a zip archive's full contents into *target_dir*.

    The directory is created when missing. Extracting into a directory that
    already holds a previous extraction overwrites the conflicting entries,
    so re-running after a role restart is safe. Returns the number of
    entries written.
    """
    archive = Path(archive)
    target = Path(target_dir)
    try:
        target.mkdir(parents=True, exist_ok=True)
        root = target.resolve()
        with zipfile.ZipFile(archive) as zf:
            members = zf.infolist()
            for member in members:
                if not _inside(root, member.filename):
                    raise StagingError(f"Archive entry escapes target directory: {member.filename}")
            for member in members:
                _clear_conflict(root, member.filename, member.is_dir())
                zf.extract(member, root)
    except StagingError:
        raise
    except (OSError, zipfile.BadZipFile) as e:
        raise StagingError(f"Failed to extract {archive} into {target}: {e}") from e

    log.info("[stage] extracted %d entries from %s into %s", len(members), archive, target)
    return len(members)


def _clear_conflict(root: Path, name: str, is_dir: bool) -> None:
    """
    Remove whatever a previous extraction left in the way of *name*: a file
    where the archive needs a directory, or a directory where it needs a file.
    """
    parts = PurePosixPath(name).parts
    if not parts:
        return
    current = root
    for part in parts[:-1]:
        current = current / part
        if current.is_symlink() or current.is_file():
            log.debug("[stage] replacing file %s with a directory", current)
            current.unlink()
            return

    path = root.joinpath(*parts)
    if is_dir:
        if path.is_symlink() or path.is_file():
            log.debug("[stage] replacing file %s with a directory", path)
            path.unlink()
    elif path.is_dir() and not path.is_symlink():
        log.debug("[stage] replacing directory %s with a file", path)
        shutil.rmtree(path)


def _extract_tar(package: Path, root: Path) -> int:
    with tarfile.open(package) as tf:
        members = tf.getmembers()
        for member in members:
            if not _inside(root, member.name):
                raise StagingError(f"Archive entry escapes target directory: {member.name}")
        for member in members:
            _clear_conflict(root, member.name, member.isdir())
        if hasattr(tarfile, "data_filter"):
            tf.extractall(root, filter="data")
        else:
            tf.extractall(root)
    return len(members)


def _make_executable(bin_dir: Path) -> None:
    for entry in bin_dir.iterdir():
        if entry.is_file():
            mode = entry.stat().st_mode
            entry.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def java_home_for(install_root: PathLike) -> Path:
    return Path(install_root) / JDK_DIR_NAME


def install_jdk(package: PathLike, install_root: PathLike) -> Path:
    """
    Unpack a JDK package into *install_root* and return the Java home
    (``install_root/java``).

    Zip and tar packages are accepted. Zip extraction drops POSIX mode bits,
    so on POSIX hosts the launchers in ``java/bin`` are made executable.
    """
    package = Path(package)
    root = Path(install_root)
    name = package.name.lower()
    try:
        if name.endswith(_TAR_SUFFIXES):
            root.mkdir(parents=True, exist_ok=True)
            count = _extract_tar(package, root.resolve())
            log.info("[stage] extracted %d entries from %s into %s", count, package, root)
        elif name.endswith(".zip"):
            extract_archive(package, root)
        else:
            raise StagingError(f"Unsupported JDK package format: {package.name}")

        java_home = java_home_for(root)
        bin_dir = java_home / "bin"
        executable = bin_dir / ("java.exe" if sys.platform.startswith("win") else "java")
        if not executable.is_file():
            raise StagingError(f"JDK package {package.name} has no {executable.relative_to(root)}")
        if os.name == "posix":
            _make_executable(bin_dir)
    except StagingError:
        raise
    except (OSError, tarfile.TarError) as e:
        raise StagingError(f"Failed to install JDK from {package} into {root}: {e}") from e

    log.info("[stage] JDK installed at %s", java_home)
    return java_home
