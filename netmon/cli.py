"""
Command line entry point.

Every flag is optional: anything left unset falls back to the matching
``MONITOR_*`` environment variable (or ``.env``), then to the default.

Examples:
    internet-monitor --interval 5 --influxdb-url http://influxdb:8086
    internet-monitor --once --log-level debug
"""

from __future__ import annotations

import asyncio

import typer

from netmon.core.config import load_settings
from netmon.core.errors import ConfigError
from netmon.core.logs import configure_logging
from netmon.factory import run_monitor

CONFIG_ERROR_EXIT_CODE = 2

cli_app = typer.Typer(
    help="Measure latency, download and upload throughput and store them in InfluxDB.",
    add_completion=False,
)


@cli_app.command()
def run(
    interval: float = typer.Option(
        None, "--interval", "-i", help="Time between runs in seconds (default: 5)"
    ),
    influxdb_url: str = typer.Option(None, "--influxdb-url", help="InfluxDB URL"),
    influxdb_db: str = typer.Option(None, "--influxdb-db", help="InfluxDB database"),
    influxdb_username: str = typer.Option(None, "--influxdb-username"),
    influxdb_password: str = typer.Option(None, "--influxdb-password"),
    latency_url: str = typer.Option(None, "--latency-url", help="Host to ping"),
    download_url: str = typer.Option(None, "--download-url"),
    upload_url: str = typer.Option(None, "--upload-url"),
    log_level: str = typer.Option(None, "--log-level"),
    once: bool = typer.Option(False, "--once", help="Run a single iteration and exit"),
) -> None:
    """Run the measurement loop until interrupted."""
    try:
        settings = load_settings(
            interval_seconds=interval,
            influx_url=influxdb_url,
            influx_db=influxdb_db,
            influx_username=influxdb_username,
            influx_password=influxdb_password,
            latency_host=latency_url,
            download_url=download_url,
            upload_url=upload_url,
            log_level=log_level,
        )
    except ConfigError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=CONFIG_ERROR_EXIT_CODE)

    configure_logging(settings.log_level)
    asyncio.run(run_monitor(settings, max_ticks=1 if once else None))
