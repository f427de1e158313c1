"""Workflow identity, step and result models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class WorkflowKind(str, Enum):
    """User-facing operations the orchestrator knows how to run."""

    BITDOWNLOAD = "bitdownload"
    OVERLAY = "overlay"
    REGISTER_ACCEL = "register_accel"
    UNREGISTER_ACCEL = "unregister_accel"
    LOAD_ACCEL = "load_accel"
    UNLOAD_ACCEL = "unload_accel"
    DTS_TO_DTBO = "dts_to_dtbo"


class WorkflowStep(str, Enum):
    """The step a workflow was in when an error was raised."""

    RESOLVE = "resolve"
    READ = "read"
    UPLOAD = "upload"
    CONVERT = "convert"
    LOAD = "load"
    REGISTER = "register"
    UNREGISTER = "unregister"
    UNLOAD = "unload"
    WRITE = "write"
    CLEANUP = "cleanup"


class WorkflowResult(BaseModel):
    """Outcome of a workflow that reached its terminal success.

    ``staged`` lists every remote name recorded during the run, in record
    order. ``removed`` lists the names the cleanup pass actually removed.
    Best-effort cleanup failures are collected in ``cleanup_errors``
    instead of failing the workflow.
    """

    model_config = ConfigDict(frozen=True)

    workflow: WorkflowKind
    staged: list[str] = []
    removed: list[str] = []
    cleanup_errors: list[str] = []
    slot: int | None = None
    output_path: Path | None = None

    @property
    def cleanup_clean(self) -> bool:
        """Whether every staged artifact was removed without error."""
        return not self.cleanup_errors
