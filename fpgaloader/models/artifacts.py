"""Artifact reference models for staged uploads."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ArtifactKind(str, Enum):
    """What a staged artifact holds."""

    BITSTREAM = "bitstream"
    BINARY_IMAGE = "binary_image"
    DEVICE_TREE_OVERLAY = "device_tree_overlay"
    DEVICE_TREE_SOURCE = "device_tree_source"
    METADATA = "metadata"


class ArtifactRef(BaseModel):
    """A local artifact and the name the remote agent addresses it by.

    ``local_path`` is ``None`` for artifacts produced remotely (a converted
    binary image) or from in-memory bytes (a converted overlay).
    """

    model_config = ConfigDict(frozen=True)

    remote_name: str
    kind: ArtifactKind
    local_path: Path | None = None
