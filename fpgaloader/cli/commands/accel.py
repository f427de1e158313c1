"""Accelerator package commands: register, unregister, load, unload."""

from __future__ import annotations

from typing import Optional

import typer

from fpgaloader.cli.runtime import console, run_workflow


def register_accel_cmd(
    ctx: typer.Context,
    accel_name: str = typer.Argument(..., help="Accelerator name."),
    dtbo_file: str = typer.Argument(..., help="DTBO (or DTS) file path."),
    bitstream_file: str = typer.Argument(..., help="Bitstream (.bit) or binary image file path."),
    json_file: Optional[str] = typer.Option(
        None,
        "--json",
        "-j",
        help="JSON metadata file path.",
    ),
) -> None:
    """Stage an accelerator's artifacts and register the package."""
    console.print(f"Registering accelerator: {accel_name}")
    run_workflow(
        ctx,
        lambda orchestrator: orchestrator.register_accelerator(
            accel_name, dtbo_file, bitstream_file, json_file
        ),
    )
    console.print("[bold green]Accelerator registered successfully[/bold green]")


def unregister_accel_cmd(
    ctx: typer.Context,
    accel_name: str = typer.Argument(..., help="Accelerator name."),
) -> None:
    """Unregister an accelerator package."""
    console.print(f"Unregistering accelerator: {accel_name}")
    run_workflow(ctx, lambda orchestrator: orchestrator.unregister_accelerator(accel_name))
    console.print("[bold green]Accelerator unregistered successfully[/bold green]")


def load_cmd(
    ctx: typer.Context,
    accel_name: str = typer.Argument(..., help="Accelerator name."),
) -> None:
    """Load a registered accelerator package into a free slot."""
    console.print(f"Loading accelerator: {accel_name}")
    result = run_workflow(ctx, lambda orchestrator: orchestrator.load_accelerator(accel_name))
    console.print(
        f"[bold green]Accelerator loaded successfully to slot {result.slot}[/bold green]"
    )


def unload_cmd(
    ctx: typer.Context,
    slot: int = typer.Argument(0, help="Slot number."),
) -> None:
    """Unload the accelerator occupying a slot."""
    console.print(f"Unloading accelerator from slot: {slot}")
    run_workflow(ctx, lambda orchestrator: orchestrator.unload_accelerator(slot))
    console.print("[bold green]Accelerator unloaded successfully[/bold green]")
