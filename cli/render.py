from __future__ import annotations

from typing import Any, Iterable

import typer

from app.web import format_temperature
from models.records import Sample


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_sample(sample: Sample, device_path: str) -> None:
    echo_heading("Sensor Reading")
    echo_key_values(
        [
            ("device_path", device_path),
            ("temperature", format_temperature(sample.temperature)),
            ("source", sample.source),
        ]
    )
