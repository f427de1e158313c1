"""Bridge layer between fpgaloader and the remote FPGA management agent.

Modules
-------
remote_agent
    The ``RemoteAgent`` Protocol: every remote operation a workflow needs.
    The orchestrator depends only on this contract.
http_agent
    ``HttpRemoteAgent``, the HTTP/JSON implementation built on
    ``httpx.AsyncClient``.
"""

from fpgaloader.bridge.http_agent import HttpRemoteAgent
from fpgaloader.bridge.remote_agent import RemoteAgent

__all__ = ["HttpRemoteAgent", "RemoteAgent"]
