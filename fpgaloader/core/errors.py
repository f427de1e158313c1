"""Error taxonomy for staged FPGA workflows.

Every error carries the ``WorkflowStep`` it was raised in, so the caller can
tell an upload failure from a conversion, load or cleanup failure.
"""

from __future__ import annotations

from pathlib import Path

from fpgaloader.models.workflows import WorkflowStep


class LoaderError(RuntimeError):
    """Base class for all fpgaloader failures."""

    def __init__(self, message: str, *, step: WorkflowStep | None = None) -> None:
        super().__init__(message)
        self.step = step

    def with_step(self, step: WorkflowStep) -> LoaderError:
        """Attach *step* unless a more specific one is already set."""
        if self.step is None:
            self.step = step
        return self


class InvalidPathError(LoaderError):
    """Raised when a supplied path has no extractable file name."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(
            f"Invalid file path {str(path)!r}: no file name component",
            step=WorkflowStep.RESOLVE,
        )
        self.path = path


class TransportError(LoaderError):
    """Raised when a remote call could not complete."""

    def __init__(
        self,
        operation: str,
        message: str,
        *,
        step: WorkflowStep | None = None,
    ) -> None:
        super().__init__(f"{operation}: {message}", step=step)
        self.operation = operation


class RemoteRejectionError(LoaderError):
    """Raised when a remote call completed but reported failure."""


class LocalIOError(LoaderError):
    """Raised when reading or writing a local file fails."""

    def __init__(
        self,
        path: str | Path,
        message: str,
        *,
        step: WorkflowStep | None = None,
    ) -> None:
        super().__init__(f"{path}: {message}", step=step)
        self.path = path


class CleanupError(LoaderError):
    """Raised when a fail-fast cleanup pass cannot remove an artifact."""

    def __init__(self, remote_name: str, cause: Exception) -> None:
        super().__init__(
            f"Failed to remove staged artifact {remote_name!r}: {cause}",
            step=WorkflowStep.CLEANUP,
        )
        self.remote_name = remote_name
        self.cause = cause
