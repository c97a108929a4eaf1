import zipfile
from pathlib import Path

import pytest


def make_zip(path: Path, entries: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


class FakeHost:
    """In-memory stand-in for the role host runtime."""

    def __init__(self, root: Path, settings=None, instance_id="node_IN_0"):
        self.root = root
        self.settings = dict(settings or {})
        self._instance_id = instance_id

    @property
    def instance_id(self):
        return self._instance_id

    def get_local_resource(self, name):
        return self.root / name

    def get_setting(self, key):
        return self.settings[key]


class FakePopen:
    """Records the argv and pretends the JVM ran and exited with *rc*."""

    calls = []
    rc = 0

    def __init__(self, argv, cwd=None, env=None, stdout=None, stderr=None):
        FakePopen.calls.append({"argv": argv, "cwd": cwd, "env": env, "stdout": stdout})
        self.argv = argv
        self.pid = 4242
        self.returncode = None

    def wait(self):
        self.returncode = FakePopen.rc
        return self.returncode

    def poll(self):
        return self.returncode

    def terminate(self):
        self.returncode = -15


@pytest.fixture
def fake_popen(monkeypatch):
    import subprocess

    FakePopen.calls = []
    FakePopen.rc = 0
    monkeypatch.setattr(subprocess, "Popen", FakePopen)
    return FakePopen


@pytest.fixture
def jars_zip(tmp_path: Path) -> Path:
    return make_zip(tmp_path / "bundles" / "jars.zip", {
        "zookeeper-3.4.6.jar": b"zk",
        "lib/log4j-1.2.16.jar": b"log4j",
        "lib/slf4j-api-1.6.1.jar": b"slf4j",
        "README.txt": b"not a jar",
    })


@pytest.fixture
def jdk_zip(tmp_path: Path) -> Path:
    return make_zip(tmp_path / "bundles" / "jdk.zip", {
        "java/bin/java": b"#!/bin/sh\n",
        "java/bin/java.exe": b"MZ",
        "java/lib/rt.jar": b"rt",
    })


@pytest.fixture
def java_home(tmp_path: Path) -> Path:
    home = tmp_path / "jdk" / "java"
    (home / "bin").mkdir(parents=True)
    (home / "bin" / "java").write_text("#!/bin/sh\n")
    (home / "bin" / "java.exe").write_text("MZ")
    return home
