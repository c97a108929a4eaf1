# src/jvmnode/cli/app.py
from __future__ import annotations

import io
from pathlib import Path
from typing import List, Optional

import typer

from jvmnode.execution.context import ExecutionContext
from jvmnode.host.settings import load_settings
from jvmnode.logging.log import init_logging
from jvmnode.observers.dispatcher import EventBus
from jvmnode.observers.jsonfile import JsonFileObserver
from jvmnode.observers.logger import LoggerObserver
from jvmnode.roles.registry import build_role
from jvmnode.services.shark import SharkConfig, SharkRunner
from jvmnode.services.storm import StormConfig


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="JVM service node bootstrapper")


@app.command("node")
def node(
    settings: Path = typer.Option(..., "--settings", "-s", exists=True, dir_okay=False, help="Node settings YAML"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Stage and configure, but do not start the JVM"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """
    Act as the host runtime: start the configured role, then run it until
    the service exits.
    """
    cfg = load_settings(settings)
    logger, run_id, _ = init_logging(base_dir=cfg.log_dir, verbose=verbose)

    observers = [LoggerObserver(logger)]
    if cfg.log_dir is not None:
        observers.append(JsonFileObserver(cfg.log_dir / f"{run_id}.jsonl"))
    bus = EventBus(observers=observers)

    role = build_role(cfg, bus=bus, ctx=ExecutionContext(dry_run=dry_run), run_id=run_id)
    if not role.on_start():
        raise typer.Exit(code=1)
    role.run()


@app.command("storm-yaml")
def storm_yaml(
    nimbus_host: str = typer.Option(..., "--nimbus-host"),
    zookeeper: List[str] = typer.Option(..., "--zookeeper", "-z", help="Repeat for each ZooKeeper host"),
    zookeeper_port: int = typer.Option(2181, "--zookeeper-port"),
    drpc: Optional[List[str]] = typer.Option(None, "--drpc"),
    local_dir: str = typer.Option("storm-local", "--local-dir"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Defaults to stdout"),
) -> None:
    """Render a storm.yaml."""
    config = StormConfig(
        nimbus_host=nimbus_host,
        zookeeper_servers=zookeeper,
        zookeeper_port=zookeeper_port,
        drpc_servers=drpc,
        storm_local_directory=local_dir,
    )
    if out is None:
        typer.echo(_render_to_text(config), nl=False)
    else:
        config.write_to_yaml_file(out)


def _render_to_text(config: StormConfig) -> str:
    buf = io.StringIO()
    config.write_to_yaml_file(buf)
    return buf.getvalue()


@app.command("shark-cli")
def shark_cli(
    shark_root: Path = typer.Argument(...),
    spark_root: Path = typer.Argument(...),
    java_home: Path = typer.Argument(...),
    server_port: int = typer.Option(9444, "--server-port"),
    metastore_uris: str = typer.Option("thrift://localhost:9083", "--metastore-uris"),
    spark_master: str = typer.Option("spark://localhost:7234", "--spark-master"),
) -> None:
    """Start an interactive Shark CLI and wait for it to exit."""
    config = SharkConfig(
        server_port=server_port,
        metastore_uris=metastore_uris,
        spark_home=str(spark_root),
        spark_master=spark_master,
    )
    runner = SharkRunner(shark_home=shark_root, java_home=java_home, config=config)
    runner.run_shark_cli().wait()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
