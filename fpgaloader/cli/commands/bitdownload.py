"""``fpgaloader bitdownload FILE``: program the fabric with a bitstream."""

from __future__ import annotations

import typer

from fpgaloader.cli.runtime import console, run_workflow


def bitdownload_cmd(
    ctx: typer.Context,
    bitstream_file: str = typer.Argument(..., help="Bitstream file path."),
) -> None:
    """Upload a bitstream, load it, and remove the uploaded copy."""
    console.print(f"Downloading bitstream: {bitstream_file}")
    run_workflow(ctx, lambda orchestrator: orchestrator.bitdownload(bitstream_file))
    console.print("[bold green]Bitstream downloaded successfully[/bold green]")
