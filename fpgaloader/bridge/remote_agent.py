"""Remote agent contract consumed by the workflow orchestrator.

The agent owns the hardware: it writes bitstreams to configuration memory,
compiles device-tree sources, and tracks which accelerator sits in which
slot. The orchestrator only depends on this Protocol, so any backend (the
HTTP client in ``fpgaloader.bridge.http_agent`` or an in-memory double in
tests) can be passed in.

Failure signalling
------------------
A call that cannot complete raises ``TransportError``. Calls that return a
``bool`` (or a tuple whose first item is a ``bool``) report a logical
failure by returning ``False``; the orchestrator turns that into
``RemoteRejectionError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class RemoteAgent(Protocol):
    """Async RPC surface of the FPGA management agent."""

    async def upload_artifact_bytes(self, name: str, data: bytes) -> bool:
        """Store *data* on the agent under *name*."""
        ...

    async def upload_artifact_file(self, name: str, path: Path) -> bool:
        """Store the contents of the local file *path* under *name*."""
        ...

    async def remove_artifact(self, name: str) -> None:
        """Delete the artifact stored under *name*."""
        ...

    async def convert_bitstream_to_image(
        self, source_name: str, target_name: str, platform: str
    ) -> None:
        """Convert the staged bitstream *source_name* into a binary image."""
        ...

    async def convert_source_to_overlay(self, source_text: str) -> tuple[bool, bytes]:
        """Compile device-tree source text and return the overlay bytes."""
        ...

    async def load_bitstream(self, name: str) -> None:
        """Program the fabric with the staged bitstream *name*."""
        ...

    async def load_overlay(self, name: str) -> bool:
        """Apply the staged device-tree overlay *name*."""
        ...

    async def register_accelerator(
        self,
        accel_name: str,
        image_name: str,
        overlay_name: str,
        metadata_name: str | None,
        cleanup_eligible: bool,
    ) -> None:
        """Register an accelerator package built from staged artifacts."""
        ...

    async def unregister_accelerator(self, accel_name: str) -> None:
        """Remove a registered accelerator package."""
        ...

    async def load_accelerator(self, accel_name: str) -> tuple[bool, int]:
        """Load a registered package; returns ``(success, slot)``."""
        ...

    async def unload_accelerator(self, slot: int) -> bool:
        """Unload whatever accelerator occupies *slot*."""
        ...
