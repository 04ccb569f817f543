from __future__ import annotations

import dataclasses
import math
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from cli.render import render_sample
from datastore.reading_store import ReadingStore
from services.poller import SensorPoller
from settings import Settings, get_settings


app = typer.Typer(
    help="Serve the latest one-wire sensor temperature over HTTP.",
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=True,
)


def _override_settings(**overrides: object) -> Settings:
    changes = {key: value for key, value in overrides.items() if value is not None}
    return dataclasses.replace(get_settings(), **changes)


def run_server(settings: Settings) -> None:
    from app.main import create_app

    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind (default 0.0.0.0)."),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", min=1, max=65535, help="Port to listen on (default 3000)."
    ),
    device_path: Optional[Path] = typer.Option(
        None, "--device-path", "-d", help="Path to the sensor's w1_slave file."
    ),
    poll_interval: Optional[float] = typer.Option(
        None, "--poll-interval", help="Seconds between sensor reads (default 3)."
    ),
    simulate: Optional[bool] = typer.Option(
        None,
        "--simulate/--no-simulate",
        help="Publish simulated values when the sensor cannot be read.",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level."),
) -> None:
    """Run the HTTP server and the background sensor poller."""
    if poll_interval is not None and not (math.isfinite(poll_interval) and poll_interval > 0):
        raise typer.BadParameter(
            "Poll interval must be a positive finite number.", param_hint="--poll-interval"
        )
    settings = _override_settings(
        host=host,
        port=port,
        device_path=str(device_path) if device_path is not None else None,
        poll_interval=poll_interval,
        simulate_on_failure=simulate,
        log_level=log_level.upper() if log_level else None,
    )
    typer.echo(f"Serving on http://{settings.host}:{settings.port} ...")
    run_server(settings)


@app.command("read")
def read_command(
    device_path: Optional[Path] = typer.Option(
        None, "--device-path", "-d", help="Path to the sensor's w1_slave file."
    ),
    simulate: Optional[bool] = typer.Option(
        None,
        "--simulate/--no-simulate",
        help="Fall back to a simulated value when the sensor cannot be read.",
    ),
) -> None:
    """Take a single reading and print it."""
    settings = _override_settings(
        device_path=str(device_path) if device_path is not None else None,
        simulate_on_failure=simulate,
    )
    poller = SensorPoller.from_settings(settings, ReadingStore())
    sample = poller.poll_once()
    render_sample(sample, settings.device_path)
    if sample.temperature is None:
        raise typer.Exit(code=1)
