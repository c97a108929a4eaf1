import logging
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from jvmnode.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    # init_logging binds handlers to the streams CliRunner swaps in
    logger = logging.getLogger("jvmnode")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


def test_storm_yaml_to_stdout():
    result = runner.invoke(app, ["storm-yaml", "--nimbus-host", "h1", "-z", "z1", "-z", "z2"])
    assert result.exit_code == 0, result.output
    assert result.output == (
        "storm.zookeeper.servers: [z1, z2]\n"
        "nimbus.host: h1\n"
        "storm.local.dir: storm-local\n"
        "drpc.servers: []\n"
    )


def test_storm_yaml_to_file(tmp_path: Path):
    out = tmp_path / "conf" / "storm.yaml"
    result = runner.invoke(app, [
        "storm-yaml", "--nimbus-host", "h1", "-z", "z1",
        "--drpc", "d1", "--zookeeper-port", "2182", "--out", str(out),
    ])
    assert result.exit_code == 0, result.output
    data = yaml.safe_load(out.read_text(encoding="utf-8"))
    assert data["drpc.servers"] == ["d1"]
    assert data["storm.zookeeper.port"] == 2182


def test_node_dry_run_stages_and_configures(tmp_path: Path, jars_zip: Path, jdk_zip: Path, monkeypatch):
    monkeypatch.delenv("JVMNODE_SETTINGS_OVERRIDES", raising=False)
    settings = tmp_path / "node.yaml"
    settings.write_text(yaml.safe_dump({
        "role": "storm-nimbus",
        "instance_id": "nimbus_IN_0",
        "local_resources": {
            "InstallDir": str(tmp_path / "install"),
            "DataDir": str(tmp_path / "data"),
        },
        "settings": {
            "Storm.NimbusHost": "nimbus",
            "Storm.ZooKeeperServers": "z1",
        },
        "artifacts": {"jars_archive": str(jars_zip), "jdk_package": str(jdk_zip)},
        "log_dir": str(tmp_path / "logs"),
    }), encoding="utf-8")

    result = runner.invoke(app, ["node", "--settings", str(settings), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "data" / "Config" / "storm.yaml").is_file()
    assert (tmp_path / "install" / "Java" / "java" / "bin" / "java").is_file()
    assert list((tmp_path / "logs").glob("*.jsonl"))
