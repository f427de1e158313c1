"""Per-invocation ledger of artifacts staged on the remote agent.

The ledger is created empty when a workflow starts and lives only as long
as that workflow. An entry is recorded right after the remote side holds a
new artifact (an upload or a conversion output). The orchestrator drains
the ledger only after the workflow's terminal remote call succeeds; on any
earlier failure the entries stay on the agent.

Two cleanup modes exist:

- ``BEST_EFFORT``: attempt every removal in record order, collect failures,
  never raise. Used by ``apply_overlay``.
- ``FAIL_FAST``: attempt removals in record order and raise ``CleanupError``
  on the first failure; later entries are not attempted. Used by
  ``bitdownload`` and ``register_accelerator``.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict

from fpgaloader.bridge.remote_agent import RemoteAgent
from fpgaloader.core.errors import CleanupError, LoaderError
from fpgaloader.models.artifacts import ArtifactRef

logger = logging.getLogger(__name__)


class CleanupMode(str, Enum):
    """How a ledger drain treats a failed removal."""

    BEST_EFFORT = "best_effort"
    FAIL_FAST = "fail_fast"


class RemovalFailure(BaseModel):
    """A staged artifact the drain could not remove."""

    model_config = ConfigDict(frozen=True)

    remote_name: str
    message: str


class DrainReport(BaseModel):
    """What a drain pass removed and what it could not."""

    model_config = ConfigDict(frozen=True)

    removed: list[str] = []
    failures: list[RemovalFailure] = []

    @property
    def ok(self) -> bool:
        return not self.failures


class StagingLedger:
    """Ordered record of remote artifact names staged by one workflow."""

    def __init__(self) -> None:
        self._entries: list[ArtifactRef] = []
        self._removed: list[str] = []

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record(self, ref: ArtifactRef) -> None:
        """Append *ref*. Duplicate names are kept and removed twice."""
        if ref.remote_name in self.names:
            logger.warning(
                "Staging ledger: %r recorded twice; it will be removed twice.",
                ref.remote_name,
            )
        self._entries.append(ref)
        logger.debug("Staging ledger: recorded %s (%s).", ref.remote_name, ref.kind.value)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def names(self) -> list[str]:
        """Remote names in record order."""
        return [ref.remote_name for ref in self._entries]

    @property
    def outstanding(self) -> list[str]:
        """Names still held by the agent (not yet removed by a drain)."""
        remaining = list(self._removed)
        outstanding: list[str] = []
        for name in self.names:
            if name in remaining:
                remaining.remove(name)
            else:
                outstanding.append(name)
        return outstanding

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Draining
    # ------------------------------------------------------------------

    async def drain(
        self,
        agent: RemoteAgent,
        mode: CleanupMode = CleanupMode.BEST_EFFORT,
    ) -> DrainReport:
        """Remove every recorded artifact from *agent* in record order.

        In ``FAIL_FAST`` mode the first failed removal raises
        ``CleanupError``; in ``BEST_EFFORT`` mode failures are collected in
        the returned report.
        """
        removed: list[str] = []
        failures: list[RemovalFailure] = []
        for name in self.names:
            try:
                await agent.remove_artifact(name)
            except LoaderError as exc:
                if mode is CleanupMode.FAIL_FAST:
                    raise CleanupError(name, exc) from exc
                logger.warning("Staging ledger: failed to remove %r: %s", name, exc)
                failures.append(RemovalFailure(remote_name=name, message=str(exc)))
                continue
            removed.append(name)
            self._removed.append(name)
            logger.debug("Staging ledger: removed %s.", name)
        return DrainReport(removed=removed, failures=failures)

    async def drain_all(self, agent: RemoteAgent) -> DrainReport:
        """Best-effort drain: every removal is attempted regardless of failures."""
        return await self.drain(agent, CleanupMode.BEST_EFFORT)
