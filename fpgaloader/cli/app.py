"""Main Typer application: imports and registers all CLI commands.

Entry point: ``fpgaloader`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging
from typing import Optional

import typer
from pydantic import ValidationError
from rich.markup import escape

from fpgaloader.cli.commands.accel import (
    load_cmd,
    register_accel_cmd,
    unload_cmd,
    unregister_accel_cmd,
)
from fpgaloader.cli.commands.bitdownload import bitdownload_cmd
from fpgaloader.cli.commands.dts2dtbo import dts2dtbo_cmd
from fpgaloader.cli.commands.overlay import overlay_cmd
from fpgaloader.cli.runtime import CliContext, console
from fpgaloader.config import LoaderConfig

app = typer.Typer(
    name="fpgaloader",
    help="FPGA loader: stage bitstreams, overlays and accelerators on a remote agent.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    ip: Optional[str] = typer.Option(
        None,
        "--ip",
        "-i",
        help="FPGA agent address as HOST:PORT (default: FPGALOADER_SERVER or 127.0.0.1:8051).",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (default: FPGALOADER_LOG_LEVEL or WARNING).",
    ),
) -> None:
    """Global options shared by every command."""
    state = ctx.ensure_object(CliContext)
    updates: dict[str, str] = {}
    if ip is not None:
        updates["server"] = ip
    if log_level is not None:
        updates["log_level"] = log_level.upper()

    try:
        settings = state.settings or LoaderConfig()
        if updates:
            settings = LoaderConfig.model_validate({**settings.model_dump(), **updates})
    except ValidationError as exc:
        console.print(f"[bold red]Invalid configuration:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    state.settings = settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommands
app.command(name="bitdownload", help="Download bitstream to FPGA.")(bitdownload_cmd)
app.command(name="overlay", help="Apply DeviceTree Overlay.")(overlay_cmd)
app.command(name="register-accel", help="Register accelerator package.")(register_accel_cmd)
app.command(name="unregister-accel", help="Unregister accelerator package.")(unregister_accel_cmd)
app.command(name="load", help="Load accelerator package.")(load_cmd)
app.command(name="unload", help="Unload accelerator package.")(unload_cmd)
app.command(name="dts2dtbo", help="Convert DTS file to DTBO file.")(dts2dtbo_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
