import os
import shutil
from pathlib import Path

import pytest
import yaml

from conftest import FakeHost
from jvmnode.errors import ConstructionError, ProcessFailure, StagingError
from jvmnode.host.settings import ArtifactSettings, NodeSettings
from jvmnode.observers.dispatcher import EventBus
from jvmnode.observers.events import ArtifactExtracted, ConfigWritten, NodeFailed
from jvmnode.roles.base import NodeState
from jvmnode.roles.registry import build_role
from jvmnode.roles.storm import StormRole
from jvmnode.roles.zookeeper import MAIN_CLASS, ZookeeperRole


class RecordingSink:
    def __init__(self):
        self.records = []

    def write_failure(self, name, text):
        self.records.append((name, text))


class RecordingObserver:
    def __init__(self):
        self.events = []

    def notify(self, event):
        self.events.append(event)

    def of(self, kind):
        return [e for e in self.events if isinstance(e, kind)]


@pytest.fixture
def artifacts(jars_zip: Path, jdk_zip: Path) -> ArtifactSettings:
    return ArtifactSettings(jars_archive=jars_zip, jdk_package=jdk_zip)


def _zookeeper(tmp_path, artifacts, settings=None, sink=None, bus=None, instance_id="node_IN_0"):
    host = FakeHost(tmp_path / "host", settings, instance_id=instance_id)
    return ZookeeperRole(host, artifacts, bus=bus, sink=sink)


# ----------------- startup failures -----------------

def test_corrupt_jars_archive_is_persisted_once_and_reraised(tmp_path: Path, jdk_zip: Path):
    bad = tmp_path / "bundles" / "bad-jars.zip"
    bad.write_bytes(b"definitely not a zip")
    diag = tmp_path / "diag"
    observer = RecordingObserver()
    role = _zookeeper(
        tmp_path,
        ArtifactSettings(jars_archive=bad, jdk_package=jdk_zip),
        settings={"Diagnostics.ConnectionString": f"LocalDirectory={diag}"},
        bus=EventBus([observer]),
    )

    with pytest.raises(StagingError):
        role.on_start()

    assert role.state is NodeState.FAILED
    records = list(diag.iterdir())
    assert len(records) == 1
    assert records[0].name.startswith("exception-node_IN_0-")
    assert "StagingError" in records[0].read_text(encoding="utf-8")
    (failed,) = observer.of(NodeFailed)
    assert failed.phase == "start:staging"


def test_unreachable_sink_still_surfaces_original_failure(tmp_path: Path, jdk_zip: Path):
    bad = tmp_path / "bundles" / "bad-jars.zip"
    bad.write_bytes(b"nope")
    # no Diagnostics.ConnectionString setting: the sink cannot be resolved
    role = _zookeeper(tmp_path, ArtifactSettings(jars_archive=bad, jdk_package=jdk_zip))

    with pytest.raises(StagingError):
        role.on_start()
    assert role.state is NodeState.FAILED


def test_run_before_start_is_rejected(tmp_path: Path, artifacts):
    sink = RecordingSink()
    role = _zookeeper(tmp_path, artifacts, sink=sink)
    with pytest.raises(RuntimeError):
        role.run()
    assert role.state is NodeState.FAILED
    assert len(sink.records) == 1


# ----------------- zookeeper -----------------

def test_zookeeper_start_stages_and_writes_config(tmp_path: Path, artifacts):
    observer = RecordingObserver()
    role = _zookeeper(tmp_path, artifacts, bus=EventBus([observer]))

    assert role.on_start() is True

    assert role.state is NodeState.READY
    paths = role.paths
    assert (paths.jars_home / "zookeeper-3.4.6.jar").is_file()
    assert (paths.java_home / "bin" / "java").is_file()
    props = role.zookeeper_properties_path.read_text(encoding="utf-8")
    assert props.startswith(f"dataDir={paths.data_directory.as_posix()}\nclientPort=2181\n")
    assert "server.1" not in props
    assert not (paths.data_directory / "myid").exists()
    log4j = role.log4j_properties_path.read_text(encoding="utf-8")
    assert log4j.splitlines()[0] == "log4j.rootLogger=INFO,stdout"

    assert observer.of(ArtifactExtracted)[0].entries == 4
    assert [e.kind for e in observer.of(ConfigWritten)] == ["properties", "properties"]


def test_jars_bundled_with_a_package_are_staged(tmp_path: Path, jars_zip: Path, jdk_zip: Path, monkeypatch):
    package = tmp_path / "site" / "zookeeper_role_bundles"
    package.mkdir(parents=True)
    (package / "__init__.py").write_text("")
    shutil.copy(jars_zip, package / "jars.zip")
    monkeypatch.syspath_prepend(str(tmp_path / "site"))

    role = _zookeeper(
        tmp_path,
        ArtifactSettings(jars_archive=Path("zookeeper_role_bundles:jars.zip"), jdk_package=jdk_zip),
    )
    role.on_start()

    assert (role.paths.jars_home / "zookeeper-3.4.6.jar").read_bytes() == b"zk"


def test_zookeeper_start_twice_succeeds(tmp_path: Path, artifacts):
    _zookeeper(tmp_path, artifacts).on_start()
    role = _zookeeper(tmp_path, artifacts)
    assert role.on_start() is True
    assert role.state is NodeState.READY


def test_zookeeper_run_launches_quorum_peer(fake_popen, tmp_path: Path, artifacts):
    role = _zookeeper(tmp_path, artifacts)
    role.on_start()
    role.run()

    assert role.state is NodeState.STOPPED
    argv = fake_popen.calls[0]["argv"]
    assert argv[0] == str(role.paths.java_home / "bin" / "java")
    assert argv[1] == f"-Dlog4j.configuration={role.log4j_properties_path.as_uri()}"
    assert argv[2] == "-cp"
    assert [Path(p).name for p in argv[3].split(os.pathsep)] == [
        "log4j-1.2.16.jar", "slf4j-api-1.6.1.jar", "zookeeper-3.4.6.jar",
    ]
    assert argv[4:] == [MAIN_CLASS, str(role.zookeeper_properties_path)]


def test_zookeeper_non_zero_exit_fails_the_node(fake_popen, tmp_path: Path, artifacts):
    fake_popen.rc = 1
    sink = RecordingSink()
    role = _zookeeper(tmp_path, artifacts, sink=sink)
    role.on_start()

    with pytest.raises(ProcessFailure) as ei:
        role.run()

    assert ei.value.exit_code == 1
    assert role.state is NodeState.FAILED
    assert "ProcessFailure" in sink.records[0][1]


def test_zookeeper_quorum_member_writes_myid(tmp_path: Path, artifacts):
    role = _zookeeper(tmp_path, artifacts, settings={"Zookeeper.Servers": "zk0, node_IN_0, zk2"})
    role.on_start()

    props = role.zookeeper_properties_path.read_text(encoding="utf-8")
    assert "server.2=node_IN_0:2888:3888\n" in props
    assert (role.paths.data_directory / "myid").read_text(encoding="utf-8") == "2\n"


def test_zookeeper_explicit_myid_wins(tmp_path: Path, artifacts):
    role = _zookeeper(
        tmp_path, artifacts, settings={"Zookeeper.Servers": "a,b,c", "Zookeeper.MyId": "3"}
    )
    role.on_start()
    assert (role.paths.data_directory / "myid").read_text(encoding="utf-8") == "3\n"


@pytest.mark.parametrize("settings", [
    {"Zookeeper.Servers": "a,b"},
    {"Zookeeper.Servers": "a,b", "Zookeeper.MyId": "5"},
    {"Zookeeper.Servers": "a,b", "Zookeeper.MyId": "two"},
])
def test_zookeeper_unknown_quorum_identity_fails(tmp_path: Path, artifacts, settings):
    sink = RecordingSink()
    role = _zookeeper(tmp_path, artifacts, settings=settings, sink=sink)
    with pytest.raises(ConstructionError):
        role.on_start()
    assert role.state is NodeState.FAILED
    assert len(sink.records) == 1


# ----------------- storm -----------------

STORM_SETTINGS = {
    "Storm.NimbusHost": "h1",
    "Storm.ZooKeeperServers": "z1,z2",
}


def test_storm_role_writes_storm_yaml(tmp_path: Path, artifacts):
    host = FakeHost(tmp_path / "host", STORM_SETTINGS)
    role = StormRole(host, artifacts, "supervisor")
    role.on_start()

    data = yaml.safe_load(role.storm_yaml_path.read_text(encoding="utf-8"))
    assert data["storm.zookeeper.servers"] == ["z1", "z2"]
    assert data["nimbus.host"] == "h1"
    assert data["storm.local.dir"] == role.paths.data_directory.as_posix()
    assert data["drpc.servers"] == []
    log4j = role.log4j_properties_path.read_text(encoding="utf-8")
    assert "supervisor.log" in log4j


def test_storm_role_launches_daemon(fake_popen, tmp_path: Path, artifacts):
    host = FakeHost(tmp_path / "host", dict(STORM_SETTINGS, **{"Storm.MaxNodeMemoryMb": "1024"}))
    role = StormRole(host, artifacts, "nimbus")
    role.on_start()
    role.run()

    argv = fake_popen.calls[0]["argv"]
    assert argv[1] == "-Xmx1024m"
    assert "-Dstorm.conf.file=storm.yaml" in argv
    assert "-Dlogfile.name=nimbus.log" in argv
    cp = argv[argv.index("-cp") + 1].split(os.pathsep)
    assert cp[0] == str(role.paths.configs_directory)
    assert argv[-1] == "backtype.storm.daemon.nimbus"


def test_storm_role_without_nimbus_host_fails(tmp_path: Path, artifacts):
    sink = RecordingSink()
    host = FakeHost(tmp_path / "host", {"Storm.ZooKeeperServers": "z1"})
    role = StormRole(host, artifacts, "ui", sink=sink)
    with pytest.raises(KeyError):
        role.on_start()
    assert role.state is NodeState.FAILED
    assert len(sink.records) == 1


def test_unknown_storm_daemon_is_rejected(tmp_path: Path, artifacts):
    with pytest.raises(ConstructionError):
        StormRole(FakeHost(tmp_path, {}), artifacts, "logviewer")


# ----------------- registry -----------------

def test_build_role_from_settings(tmp_path: Path, artifacts):
    settings = NodeSettings(
        role="storm-drpc",
        instance_id="n1",
        local_resources={"InstallDir": tmp_path / "i", "DataDir": tmp_path / "d"},
        artifacts=artifacts,
    )
    role = build_role(settings)
    assert isinstance(role, StormRole)
    assert role.daemon == "drpc"
    assert role.run_ctx["role"] == "storm-drpc"

    zk = build_role(settings.model_copy(update={"role": "zookeeper"}))
    assert isinstance(zk, ZookeeperRole)
