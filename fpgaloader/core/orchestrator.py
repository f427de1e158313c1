"""Staged workflow orchestrator: sequences remote calls per operation.

Each public coroutine is one user-facing workflow. A workflow resolves
remote names, stages artifacts on the agent (recording each one in a
fresh ``StagingLedger``), makes a single terminal call (load, apply or
register), and only after that call succeeds removes what it staged.

Any error before the terminal call succeeds propagates immediately and
leaves the staged artifacts on the agent. Cleanup never runs from a
``finally`` block: the ledger is drained only on terminal success.

Cleanup policy per workflow
---------------------------
- ``bitdownload``: fail-fast (single artifact).
- ``apply_overlay``: best-effort; removal failures are reported in the
  result and do not fail the workflow.
- ``register_accelerator``: fail-fast; the first removal failure raises
  ``CleanupError`` and later removals are not attempted.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fpgaloader.bridge.remote_agent import RemoteAgent
from fpgaloader.core import local_files
from fpgaloader.core.errors import LoaderError, RemoteRejectionError
from fpgaloader.core.naming import (
    artifact_ref,
    derive_converted_binary_name,
    derive_overlay_name_from_source,
    is_bitstream,
    is_device_tree_source,
)
from fpgaloader.core.staging_ledger import CleanupMode, DrainReport, StagingLedger
from fpgaloader.models.artifacts import ArtifactKind, ArtifactRef
from fpgaloader.models.workflows import WorkflowKind, WorkflowResult, WorkflowStep

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM = "zynqmp"


class WorkflowOrchestrator:
    """Runs staged FPGA workflows against a remote agent.

    Parameters
    ----------
    agent:
        Any ``RemoteAgent`` implementation. The orchestrator holds no
        connection state of its own.
    platform:
        Platform tag passed to bitstream -> binary image conversion.
    cleanup_eligible:
        Flag forwarded to the agent on ``register_accelerator``.
    """

    def __init__(
        self,
        agent: RemoteAgent,
        *,
        platform: str = DEFAULT_PLATFORM,
        cleanup_eligible: bool = True,
    ) -> None:
        self._agent = agent
        self._platform = platform
        self._cleanup_eligible = cleanup_eligible

    # ------------------------------------------------------------------
    # Workflows with staging
    # ------------------------------------------------------------------

    async def bitdownload(self, bitstream_path: str | Path) -> WorkflowResult:
        """Upload a bitstream, program the fabric with it, then remove it."""
        logger.info("Downloading bitstream %s", bitstream_path)
        ledger = StagingLedger()
        ref = artifact_ref(bitstream_path, ArtifactKind.BITSTREAM)

        await self._upload_file(ledger, ref)
        try:
            await self._agent.load_bitstream(ref.remote_name)
        except LoaderError as exc:
            raise exc.with_step(WorkflowStep.LOAD)

        report = await ledger.drain(self._agent, CleanupMode.FAIL_FAST)
        logger.info("Bitstream %s downloaded", ref.remote_name)
        return self._result(WorkflowKind.BITDOWNLOAD, ledger, report)

    async def apply_overlay(
        self,
        overlay_path: str | Path,
        *,
        bitstream_path: str | Path | None = None,
        binary_path: str | Path | None = None,
    ) -> WorkflowResult:
        """Stage an optional fabric image plus an overlay, then apply the overlay.

        *overlay_path* is either a compiled ``.dtbo`` (uploaded as is) or a
        ``.dts`` source (compiled by the agent and uploaded as
        ``<name>.dts.dtbo``). *bitstream_path* and *binary_path* are
        mutually exclusive.
        """
        if bitstream_path is not None and binary_path is not None:
            raise ValueError("bitstream_path and binary_path are mutually exclusive")

        logger.info("Applying device-tree overlay %s", overlay_path)
        ledger = StagingLedger()

        if bitstream_path is not None:
            await self._stage_bitstream_as_image(ledger, bitstream_path)
        elif binary_path is not None:
            await self._upload_file(ledger, artifact_ref(binary_path, ArtifactKind.BINARY_IMAGE))

        overlay_name = await self._stage_overlay(ledger, overlay_path, use_stem=False)

        try:
            applied = await self._agent.load_overlay(overlay_name)
        except LoaderError as exc:
            raise exc.with_step(WorkflowStep.LOAD)
        if not applied:
            raise RemoteRejectionError(
                f"Agent failed to apply device-tree overlay {overlay_name!r}",
                step=WorkflowStep.LOAD,
            )

        report = await ledger.drain_all(self._agent)
        if not report.ok:
            logger.warning(
                "Overlay %s applied; staged artifacts left on agent: %s",
                overlay_name, ", ".join(ledger.outstanding),
            )
        logger.info("Device-tree overlay %s applied", overlay_name)
        return self._result(WorkflowKind.OVERLAY, ledger, report)

    async def register_accelerator(
        self,
        accel_name: str,
        overlay_path: str | Path,
        bitstream_path: str | Path,
        metadata_path: str | Path | None = None,
    ) -> WorkflowResult:
        """Stage an accelerator's artifacts and register them under *accel_name*.

        A ``.bit`` *bitstream_path* is converted to a binary image on the
        agent; anything else is uploaded as the binary image directly. A
        ``.dts`` *overlay_path* is compiled and uploaded as ``<stem>.dtbo``.
        """
        logger.info("Registering accelerator %s", accel_name)
        ledger = StagingLedger()

        if is_bitstream(bitstream_path):
            image_name = await self._stage_bitstream_as_image(ledger, bitstream_path)
        else:
            image_ref = artifact_ref(bitstream_path, ArtifactKind.BINARY_IMAGE)
            await self._upload_file(ledger, image_ref)
            image_name = image_ref.remote_name

        overlay_name = await self._stage_overlay(ledger, overlay_path, use_stem=True)

        metadata_name: str | None = None
        if metadata_path is not None:
            metadata_ref = artifact_ref(metadata_path, ArtifactKind.METADATA)
            await self._upload_file(ledger, metadata_ref)
            metadata_name = metadata_ref.remote_name

        logger.info(
            "accel_name=%s image=%s overlay=%s metadata=%s",
            accel_name, image_name, overlay_name, metadata_name,
        )
        try:
            await self._agent.register_accelerator(
                accel_name,
                image_name,
                overlay_name,
                metadata_name,
                self._cleanup_eligible,
            )
        except LoaderError as exc:
            raise exc.with_step(WorkflowStep.REGISTER)

        report = await ledger.drain(self._agent, CleanupMode.FAIL_FAST)
        logger.info("Accelerator %s registered", accel_name)
        return self._result(WorkflowKind.REGISTER_ACCEL, ledger, report)

    # ------------------------------------------------------------------
    # Single-call workflows
    # ------------------------------------------------------------------

    async def unregister_accelerator(self, accel_name: str) -> WorkflowResult:
        """Remove a registered accelerator package."""
        logger.info("Unregistering accelerator %s", accel_name)
        try:
            await self._agent.unregister_accelerator(accel_name)
        except LoaderError as exc:
            raise exc.with_step(WorkflowStep.UNREGISTER)
        return WorkflowResult(workflow=WorkflowKind.UNREGISTER_ACCEL)

    async def load_accelerator(self, accel_name: str) -> WorkflowResult:
        """Load a registered accelerator; the result carries its slot."""
        logger.info("Loading accelerator %s", accel_name)
        try:
            success, slot = await self._agent.load_accelerator(accel_name)
        except LoaderError as exc:
            raise exc.with_step(WorkflowStep.LOAD)
        if not success:
            raise RemoteRejectionError(
                f"Agent failed to load accelerator {accel_name!r}",
                step=WorkflowStep.LOAD,
            )
        logger.info("Accelerator %s loaded to slot %d", accel_name, slot)
        return WorkflowResult(workflow=WorkflowKind.LOAD_ACCEL, slot=slot)

    async def unload_accelerator(self, slot: int = 0) -> WorkflowResult:
        """Unload the accelerator occupying *slot*."""
        logger.info("Unloading accelerator from slot %d", slot)
        try:
            unloaded = await self._agent.unload_accelerator(slot)
        except LoaderError as exc:
            raise exc.with_step(WorkflowStep.UNLOAD)
        if not unloaded:
            raise RemoteRejectionError(
                f"Agent failed to unload accelerator from slot {slot}",
                step=WorkflowStep.UNLOAD,
            )
        return WorkflowResult(workflow=WorkflowKind.UNLOAD_ACCEL, slot=slot)

    async def convert_dts_to_dtbo(
        self, dts_path: str | Path, dtbo_path: str | Path
    ) -> WorkflowResult:
        """Compile a local DTS file on the agent and write the overlay locally.

        Nothing is staged; the returned bytes are written verbatim.
        """
        logger.info("Converting %s -> %s", dts_path, dtbo_path)
        overlay_bytes = await self._compile_overlay(dts_path)
        local_files.write_bytes(dtbo_path, overlay_bytes)
        return WorkflowResult(workflow=WorkflowKind.DTS_TO_DTBO, output_path=Path(dtbo_path))

    # ------------------------------------------------------------------
    # Staging helpers
    # ------------------------------------------------------------------

    async def _upload_file(self, ledger: StagingLedger, ref: ArtifactRef) -> None:
        """Upload a local file under ``ref.remote_name`` and record it."""
        logger.debug("Uploading %s as %s", ref.local_path, ref.remote_name)
        try:
            uploaded = await self._agent.upload_artifact_file(ref.remote_name, ref.local_path)
        except LoaderError as exc:
            raise exc.with_step(WorkflowStep.UPLOAD)
        if not uploaded:
            raise RemoteRejectionError(
                f"Agent rejected upload of {ref.remote_name!r}",
                step=WorkflowStep.UPLOAD,
            )
        ledger.record(ref)

    async def _stage_bitstream_as_image(
        self, ledger: StagingLedger, bitstream_path: str | Path
    ) -> str:
        """Upload a bitstream and convert it to a binary image on the agent.

        Records both the bitstream and the converted image; returns the
        image's remote name.
        """
        bitstream = artifact_ref(bitstream_path, ArtifactKind.BITSTREAM)
        await self._upload_file(ledger, bitstream)

        image_name = derive_converted_binary_name(bitstream.remote_name)
        logger.debug("Converting %s -> %s (%s)", bitstream.remote_name, image_name, self._platform)
        try:
            await self._agent.convert_bitstream_to_image(
                bitstream.remote_name, image_name, self._platform
            )
        except LoaderError as exc:
            raise exc.with_step(WorkflowStep.CONVERT)
        ledger.record(ArtifactRef(remote_name=image_name, kind=ArtifactKind.BINARY_IMAGE))
        return image_name

    async def _stage_overlay(
        self, ledger: StagingLedger, overlay_path: str | Path, *, use_stem: bool
    ) -> str:
        """Stage a ``.dtbo`` file, or compile and stage a ``.dts`` source."""
        if not is_device_tree_source(overlay_path):
            ref = artifact_ref(overlay_path, ArtifactKind.DEVICE_TREE_OVERLAY)
            await self._upload_file(ledger, ref)
            return ref.remote_name

        overlay_name = derive_overlay_name_from_source(overlay_path, use_stem)
        overlay_bytes = await self._compile_overlay(overlay_path)
        try:
            uploaded = await self._agent.upload_artifact_bytes(overlay_name, overlay_bytes)
        except LoaderError as exc:
            raise exc.with_step(WorkflowStep.UPLOAD)
        if not uploaded:
            raise RemoteRejectionError(
                f"Agent rejected upload of compiled overlay {overlay_name!r}",
                step=WorkflowStep.UPLOAD,
            )
        ledger.record(
            ArtifactRef(remote_name=overlay_name, kind=ArtifactKind.DEVICE_TREE_OVERLAY)
        )
        return overlay_name

    async def _compile_overlay(self, dts_path: str | Path) -> bytes:
        """Read DTS text locally and have the agent compile it."""
        source_text = local_files.read_text(dts_path)
        logger.debug("Compiling device-tree source %s", dts_path)
        try:
            success, overlay_bytes = await self._agent.convert_source_to_overlay(source_text)
        except LoaderError as exc:
            raise exc.with_step(WorkflowStep.CONVERT)
        if not success:
            raise RemoteRejectionError(
                f"Agent failed to compile device-tree source {str(dts_path)!r}",
                step=WorkflowStep.CONVERT,
            )
        return overlay_bytes

    @staticmethod
    def _result(
        workflow: WorkflowKind, ledger: StagingLedger, report: DrainReport
    ) -> WorkflowResult:
        return WorkflowResult(
            workflow=workflow,
            staged=ledger.names,
            removed=report.removed,
            cleanup_errors=[f"{f.remote_name}: {f.message}" for f in report.failures],
        )
