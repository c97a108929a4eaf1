from pathlib import Path

import pytest
from pydantic import ValidationError

from jvmnode.host.runtime import SettingsHostRuntime
from jvmnode.host.settings import load_settings

NODE_YAML = """\
role: zookeeper
instance_id: zk_IN_1
local_resources:
  InstallDir: ${NODE_ROOT}/install
  DataDir: ${NODE_ROOT}/data
settings:
  Zookeeper.Servers: [zk_IN_0, zk_IN_1]
  Zookeeper.MyId: 2
  Diagnostics.ConnectionString: LocalDirectory=${NODE_ROOT}/diag
artifacts:
  jars_archive: /opt/bundles/jars.zip
  jdk_package: /opt/bundles/jdk.zip
"""


@pytest.fixture(autouse=True)
def _no_overrides_env(monkeypatch):
    monkeypatch.delenv("JVMNODE_SETTINGS_OVERRIDES", raising=False)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_settings_expands_environment(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("NODE_ROOT", "/srv/node")
    cfg = load_settings(_write(tmp_path / "node.yaml", NODE_YAML))

    assert cfg.role == "zookeeper"
    assert cfg.instance_id == "zk_IN_1"
    assert cfg.local_resources["InstallDir"] == Path("/srv/node/install")
    assert cfg.settings["Diagnostics.ConnectionString"] == "LocalDirectory=/srv/node/diag"
    assert cfg.artifacts.jars_archive == Path("/opt/bundles/jars.zip")


def test_non_string_settings_become_text(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("NODE_ROOT", "/srv/node")
    cfg = load_settings(_write(tmp_path / "node.yaml", NODE_YAML))
    assert cfg.settings["Zookeeper.MyId"] == "2"
    assert cfg.settings["Zookeeper.Servers"] == "zk_IN_0,zk_IN_1"


def test_local_overrides_file_is_merged(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("NODE_ROOT", "/srv/node")
    _write(tmp_path / "node.local.yaml", "settings:\n  Zookeeper.MyId: 1\n")
    cfg = load_settings(_write(tmp_path / "node.yaml", NODE_YAML))

    assert cfg.settings["Zookeeper.MyId"] == "1"
    # untouched keys survive the merge
    assert cfg.settings["Zookeeper.Servers"] == "zk_IN_0,zk_IN_1"


def test_overrides_path_from_environment(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("NODE_ROOT", "/srv/node")
    overrides = _write(tmp_path / "elsewhere.yaml", "instance_id: zk_IN_7\n")
    monkeypatch.setenv("JVMNODE_SETTINGS_OVERRIDES", str(overrides))
    cfg = load_settings(_write(tmp_path / "node.yaml", NODE_YAML))
    assert cfg.instance_id == "zk_IN_7"


def test_unknown_role_is_rejected(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("NODE_ROOT", "/srv/node")
    text = NODE_YAML.replace("role: zookeeper", "role: kafka")
    with pytest.raises(ValidationError):
        load_settings(_write(tmp_path / "node.yaml", text))


def test_host_runtime_lookups(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("NODE_ROOT", "/srv/node")
    host = SettingsHostRuntime(load_settings(_write(tmp_path / "node.yaml", NODE_YAML)))

    assert host.instance_id == "zk_IN_1"
    assert host.get_local_resource("DataDir") == Path("/srv/node/data")
    assert host.get_setting("Zookeeper.MyId") == "2"
    with pytest.raises(KeyError):
        host.get_setting("Storm.NimbusHost")
    with pytest.raises(KeyError):
        host.get_local_resource("ScratchDir")
