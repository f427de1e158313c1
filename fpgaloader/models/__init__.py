"""fpgaloader data models: all Pydantic v2, all frozen (immutable)."""

from fpgaloader.models.artifacts import ArtifactKind, ArtifactRef
from fpgaloader.models.workflows import WorkflowKind, WorkflowResult, WorkflowStep

__all__ = [
    # artifacts
    "ArtifactKind",
    "ArtifactRef",
    # workflows
    "WorkflowKind",
    "WorkflowStep",
    "WorkflowResult",
]
