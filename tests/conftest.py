"""Shared test fixtures for fpgaloader."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from fpgaloader.core import local_files
from fpgaloader.core.errors import TransportError
from fpgaloader.core.orchestrator import WorkflowOrchestrator


class RecordingAgent:
    """In-memory ``RemoteAgent`` that records every call in order.

    Knobs
    -----
    ``fail``: operation name -> exception raised when that operation runs.
    ``reject``: operation names whose boolean result is forced to ``False``.
    ``fail_remove``: artifact names whose removal raises ``TransportError``.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.stored: dict[str, bytes] = {}
        self.fail: dict[str, Exception] = {}
        self.reject: set[str] = set()
        self.fail_remove: set[str] = set()
        self.overlay_bytes = b"\xd0\x0d\xfe\xed-compiled-overlay"
        self.slot = 0
        self.closed = False

    # -- helpers -------------------------------------------------------

    def _enter(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, *args))
        if operation in self.fail:
            raise self.fail[operation]

    def ops(self) -> list[str]:
        return [call[0] for call in self.calls]

    def removed(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "remove_artifact"]

    # -- RemoteAgent ---------------------------------------------------

    async def upload_artifact_bytes(self, name: str, data: bytes) -> bool:
        self._enter("upload_artifact_bytes", name, data)
        if "upload_artifact_bytes" in self.reject:
            return False
        self.stored[name] = data
        return True

    async def upload_artifact_file(self, name: str, path: Path) -> bool:
        self._enter("upload_artifact_file", name, path)
        data = local_files.read_bytes(path)
        if "upload_artifact_file" in self.reject:
            return False
        self.stored[name] = data
        return True

    async def remove_artifact(self, name: str) -> None:
        self._enter("remove_artifact", name)
        if name in self.fail_remove:
            raise TransportError("remove_artifact", f"cannot remove {name}")
        self.stored.pop(name, None)

    async def convert_bitstream_to_image(
        self, source_name: str, target_name: str, platform: str
    ) -> None:
        self._enter("convert_bitstream_to_image", source_name, target_name, platform)
        self.stored[target_name] = b"image:" + self.stored.get(source_name, b"")

    async def convert_source_to_overlay(self, source_text: str) -> tuple[bool, bytes]:
        self._enter("convert_source_to_overlay", source_text)
        if "convert_source_to_overlay" in self.reject:
            return False, b""
        return True, self.overlay_bytes

    async def load_bitstream(self, name: str) -> None:
        self._enter("load_bitstream", name)

    async def load_overlay(self, name: str) -> bool:
        self._enter("load_overlay", name)
        return "load_overlay" not in self.reject

    async def register_accelerator(
        self,
        accel_name: str,
        image_name: str,
        overlay_name: str,
        metadata_name: str | None,
        cleanup_eligible: bool,
    ) -> None:
        self._enter(
            "register_accelerator",
            accel_name, image_name, overlay_name, metadata_name, cleanup_eligible,
        )

    async def unregister_accelerator(self, accel_name: str) -> None:
        self._enter("unregister_accelerator", accel_name)

    async def load_accelerator(self, accel_name: str) -> tuple[bool, int]:
        self._enter("load_accelerator", accel_name)
        return "load_accelerator" not in self.reject, self.slot

    async def unload_accelerator(self, slot: int) -> bool:
        self._enter("unload_accelerator", slot)
        return "unload_accelerator" not in self.reject

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def agent() -> RecordingAgent:
    """Provide a fresh recording agent."""
    return RecordingAgent()


@pytest.fixture
def orchestrator(agent: RecordingAgent) -> WorkflowOrchestrator:
    """Provide an orchestrator wired to the recording agent."""
    return WorkflowOrchestrator(agent)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A directory holding one of each artifact type."""
    (tmp_path / "design.bit").write_bytes(b"\x00\x09\x0f\xf0bitstream")
    (tmp_path / "design.bin").write_bytes(b"\xaa\x99\x55\x66image")
    (tmp_path / "overlay.dts").write_text(
        "/dts-v1/;\n/plugin/;\n/ { fragment@0 { target = <&fpga_full>; }; };\n",
        encoding="utf-8",
    )
    (tmp_path / "overlay.dtbo").write_bytes(b"\xd0\x0d\xfe\xedprecompiled")
    (tmp_path / "accel.json").write_text('{"shell_type": "XRT_FLAT"}', encoding="utf-8")
    return tmp_path
