"""``fpgaloader dts2dtbo IN OUT``: compile a DTS file via the agent."""

from __future__ import annotations

import typer

from fpgaloader.cli.runtime import console, run_workflow


def dts2dtbo_cmd(
    ctx: typer.Context,
    dts_file: str = typer.Argument(..., help="Input DTS file path."),
    dtbo_file: str = typer.Argument(..., help="Output DTBO file path."),
) -> None:
    """Convert a DTS file to a DTBO file using the agent's compiler."""
    console.print(f"Converting DTS to DTBO: {dts_file} -> {dtbo_file}")
    run_workflow(ctx, lambda orchestrator: orchestrator.convert_dts_to_dtbo(dts_file, dtbo_file))
    console.print("[bold green]DTS to DTBO conversion completed successfully[/bold green]")
