"""fpgaloader CLI: Typer-based command-line interface.

Provides the ``fpgaloader`` command with subcommands for downloading
bitstreams, applying device-tree overlays, managing accelerator packages,
and compiling device-tree sources through the remote agent.

All output uses Rich for formatted terminal display.
"""
