"""``fpgaloader overlay DTBO``: apply a device-tree overlay.

The overlay may be a compiled ``.dtbo`` or a ``.dts`` source (compiled by
the agent first). A bitstream (``--bit``, converted to a binary image on
the agent) or a ready binary image (``--bin``) can be staged alongside.
"""

from __future__ import annotations

from typing import Optional

import typer

from fpgaloader.cli.runtime import console, run_workflow


def overlay_cmd(
    ctx: typer.Context,
    dtbo_file: str = typer.Argument(..., help="DTBO (or DTS) file path."),
    bit: Optional[str] = typer.Option(
        None,
        "--bit",
        "-b",
        help="Bitstream file to transfer with the overlay.",
    ),
    bin_file: Optional[str] = typer.Option(
        None,
        "--bin",
        help="Binary image file to transfer with the overlay.",
    ),
) -> None:
    """Stage the overlay (and optional fabric image), then apply it."""
    if bit is not None and bin_file is not None:
        raise typer.BadParameter("--bit and --bin are mutually exclusive.")

    console.print(f"Applying DeviceTree Overlay: {dtbo_file}")
    result = run_workflow(
        ctx,
        lambda orchestrator: orchestrator.apply_overlay(
            dtbo_file, bitstream_path=bit, binary_path=bin_file
        ),
    )
    for name in result.staged:
        console.print(f"  [dim]staged[/dim] {name}")
    console.print("[bold green]DeviceTree Overlay applied successfully[/bold green]")
