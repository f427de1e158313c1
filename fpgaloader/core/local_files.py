"""Local filesystem boundary: whole-file reads and writes."""

from __future__ import annotations

from pathlib import Path

from fpgaloader.core.errors import LocalIOError
from fpgaloader.models.workflows import WorkflowStep


def read_bytes(path: str | Path) -> bytes:
    """Read the whole file at *path* as bytes."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise LocalIOError(path, f"cannot read file: {exc}", step=WorkflowStep.READ) from exc


def read_text(path: str | Path) -> str:
    """Read the whole file at *path* as UTF-8 text."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LocalIOError(path, f"cannot read file: {exc}", step=WorkflowStep.READ) from exc


def write_bytes(path: str | Path, data: bytes) -> None:
    """Write *data* to *path* verbatim, replacing any existing file."""
    try:
        Path(path).write_bytes(data)
    except OSError as exc:
        raise LocalIOError(path, f"cannot write file: {exc}", step=WorkflowStep.WRITE) from exc
