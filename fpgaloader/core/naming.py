"""Remote artifact naming rules.

Pure functions: nothing here touches the filesystem beyond looking at the
final component of a path.

Overlay names derived from a device-tree source differ between call sites:
``apply_overlay`` keeps the ``.dts`` suffix (``design.dts.dtbo``) while
``register_accelerator`` strips it (``design.dtbo``). Each call site passes
``use_stem`` explicitly.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePath

from fpgaloader.core.errors import InvalidPathError
from fpgaloader.models.artifacts import ArtifactKind, ArtifactRef

BINARY_IMAGE_SUFFIX = ".bin"
OVERLAY_SUFFIX = ".dtbo"
SOURCE_SUFFIX = ".dts"
BITSTREAM_SUFFIX = ".bit"

_SEPARATORS = tuple({"/", os.sep})


def base_name(path: str | Path) -> str:
    """Return the final component of *path*.

    Raises ``InvalidPathError`` for an empty path, a root path, a path
    ending in a separator, or a final component of ``.`` or ``..``.
    """
    raw = os.fspath(path)
    if not raw or raw.endswith(_SEPARATORS):
        raise InvalidPathError(raw)
    name = PurePath(raw).name
    if name in ("", ".", ".."):
        raise InvalidPathError(raw)
    return name


def derive_converted_binary_name(bitstream_remote_name: str) -> str:
    """Name of the binary image converted from a staged bitstream.

    Appends ``.bin`` to the full name (``foo.bit`` -> ``foo.bit.bin``).
    Calling it twice appends twice.
    """
    return f"{bitstream_remote_name}{BINARY_IMAGE_SUFFIX}"


def derive_overlay_name_from_source(dts_path: str | Path, use_stem: bool) -> str:
    """Remote name for an overlay compiled from *dts_path*.

    ``use_stem=True``: ``design.dts`` -> ``design.dtbo``.
    ``use_stem=False``: ``design.dts`` -> ``design.dts.dtbo``.
    """
    name = base_name(dts_path)
    if use_stem:
        name = PurePath(name).stem
    return f"{name}{OVERLAY_SUFFIX}"


def is_device_tree_source(path: str | Path) -> bool:
    """Whether *path* names device-tree source text (``.dts``)."""
    return os.fspath(path).endswith(SOURCE_SUFFIX)


def is_bitstream(path: str | Path) -> bool:
    """Whether *path* names a raw bitstream (``.bit``)."""
    return os.fspath(path).endswith(BITSTREAM_SUFFIX)


def artifact_ref(path: str | Path, kind: ArtifactKind) -> ArtifactRef:
    """Build an ``ArtifactRef`` for a local file, named by its base name."""
    return ArtifactRef(
        remote_name=base_name(path),
        kind=kind,
        local_path=Path(path),
    )
