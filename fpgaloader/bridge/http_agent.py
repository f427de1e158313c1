"""HTTP bridge: ``RemoteAgent`` implementation over ``httpx.AsyncClient``.

The stock FPGA management agent serves gRPC, and ``HttpRemoteAgent`` does
not speak it. This client needs an agent (or a gateway in front of one)
that exposes the HTTP/JSON contract below. A gRPC client plugs in as
another implementation of the ``RemoteAgent`` Protocol; the orchestrator
only sees that Protocol.

Wire contract
-------------
Every operation is a ``POST {base_url}/{operation}`` carrying a JSON object
and answered with a JSON object. Binary payloads (artifact uploads and
compiled overlays) travel base64-encoded in a ``data`` field.

==============================  ==========================================  ==========================
operation                       request fields                              response fields
==============================  ==========================================  ==========================
``upload_artifact``             ``name``, ``data``                          ``success``
``remove_artifact``             ``name``                                    (none)
``convert_bitstream_to_image``  ``source_name``, ``target_name``,           (none)
                                ``platform``
``convert_source_to_overlay``   ``source``                                  ``success``, ``data``
``load_bitstream``              ``name``                                    (none)
``load_overlay``                ``name``                                    ``success``
``register_accelerator``        ``accel_name``, ``image_name``,             (none)
                                ``overlay_name``, ``metadata_name``,
                                ``cleanup_eligible``
``unregister_accelerator``      ``accel_name``                              (none)
``load_accelerator``            ``accel_name``                              ``success``, ``slot``
``unload_accelerator``          ``slot``                                    ``success``
==============================  ==========================================  ==========================

Connection errors, non-2xx statuses and malformed bodies all raise
``TransportError`` naming the operation.
"""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path
from typing import Any

import httpx

from fpgaloader.core import local_files
from fpgaloader.core.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0


def normalize_target(target: str) -> str:
    """Turn ``host:port`` into a base URL; full URLs pass through."""
    target = target.strip().rstrip("/")
    if "://" not in target:
        target = f"http://{target}"
    return target


class HttpRemoteAgent:
    """Talks to the FPGA management agent over HTTP/JSON.

    Parameters
    ----------
    target:
        ``host:port`` of the agent, or a full base URL.
    timeout:
        Per-request timeout in seconds. ``None`` waits indefinitely.
    client:
        Pre-built ``httpx.AsyncClient`` (tests pass one wired to
        ``httpx.MockTransport``). Its ``base_url`` is left untouched.
    """

    def __init__(
        self,
        target: str,
        *,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = normalize_target(target)
        if client is None:
            client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(timeout, connect=DEFAULT_CONNECT_TIMEOUT_SECONDS),
            )
            logger.info("HttpRemoteAgent: connecting to %s", self._base_url)
        self._client = client

    # ------------------------------------------------------------------
    # RemoteAgent operations
    # ------------------------------------------------------------------

    async def upload_artifact_bytes(self, name: str, data: bytes) -> bool:
        body = await self._call("upload_artifact", {"name": name, "data": _encode(data)})
        return self._flag(body, "upload_artifact")

    async def upload_artifact_file(self, name: str, path: Path) -> bool:
        data = local_files.read_bytes(path)
        return await self.upload_artifact_bytes(name, data)

    async def remove_artifact(self, name: str) -> None:
        await self._call("remove_artifact", {"name": name})

    async def convert_bitstream_to_image(
        self, source_name: str, target_name: str, platform: str
    ) -> None:
        await self._call(
            "convert_bitstream_to_image",
            {"source_name": source_name, "target_name": target_name, "platform": platform},
        )

    async def convert_source_to_overlay(self, source_text: str) -> tuple[bool, bytes]:
        operation = "convert_source_to_overlay"
        body = await self._call(operation, {"source": source_text})
        success = self._flag(body, operation)
        raw = body.get("data") or ""
        try:
            data = base64.b64decode(raw, validate=True)
        except (binascii.Error, TypeError) as exc:
            raise TransportError(operation, f"invalid base64 payload: {exc}") from exc
        return success, data

    async def load_bitstream(self, name: str) -> None:
        await self._call("load_bitstream", {"name": name})

    async def load_overlay(self, name: str) -> bool:
        body = await self._call("load_overlay", {"name": name})
        return self._flag(body, "load_overlay")

    async def register_accelerator(
        self,
        accel_name: str,
        image_name: str,
        overlay_name: str,
        metadata_name: str | None,
        cleanup_eligible: bool,
    ) -> None:
        await self._call(
            "register_accelerator",
            {
                "accel_name": accel_name,
                "image_name": image_name,
                "overlay_name": overlay_name,
                "metadata_name": metadata_name,
                "cleanup_eligible": cleanup_eligible,
            },
        )

    async def unregister_accelerator(self, accel_name: str) -> None:
        await self._call("unregister_accelerator", {"accel_name": accel_name})

    async def load_accelerator(self, accel_name: str) -> tuple[bool, int]:
        operation = "load_accelerator"
        body = await self._call(operation, {"accel_name": accel_name})
        success = self._flag(body, operation)
        if not success:
            return False, 0
        if "slot" not in body:
            raise TransportError(operation, "response is missing the loaded slot")
        slot = body["slot"]
        if not isinstance(slot, int) or isinstance(slot, bool):
            raise TransportError(operation, f"invalid slot in response: {slot!r}")
        return success, slot

    async def unload_accelerator(self, slot: int) -> bool:
        body = await self._call("unload_accelerator", {"slot": slot})
        return self._flag(body, "unload_accelerator")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
        logger.info("HttpRemoteAgent: closed (%s).", self._base_url)

    async def __aenter__(self) -> HttpRemoteAgent:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"HttpRemoteAgent(base_url={self._base_url!r})"

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _call(self, operation: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST *payload* to ``/{operation}`` and return the decoded JSON body."""
        logger.debug("HttpRemoteAgent: -> %s", operation)
        try:
            response = await self._client.post(f"/{operation}", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                operation, f"agent returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(operation, f"request failed: {exc}") from exc

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError(operation, "response is not valid JSON") from exc
        if not isinstance(body, dict):
            raise TransportError(operation, "response is not a JSON object")
        logger.debug("HttpRemoteAgent: <- %s", operation)
        return body

    @staticmethod
    def _flag(body: dict[str, Any], operation: str) -> bool:
        """Extract the boolean ``success`` field from a response body."""
        success = body.get("success")
        if not isinstance(success, bool):
            raise TransportError(operation, "response is missing a boolean 'success' field")
        return success


def _encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")
