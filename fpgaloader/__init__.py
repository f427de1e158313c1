"""fpgaloader: staged FPGA configuration through a remote management agent.

Uploads bitstreams, binary images, device-tree overlays and accelerator
metadata to the agent, has it convert and apply them, and removes the
transient uploads once the terminal operation succeeds.
"""

__version__ = "0.1.0"
__description__ = "Staged FPGA bitstream, overlay and accelerator loader"

from fpgaloader.core.orchestrator import WorkflowOrchestrator
from fpgaloader.bridge.http_agent import HttpRemoteAgent
from fpgaloader.cli.app import app as cli

__all__ = ["WorkflowOrchestrator", "HttpRemoteAgent", "cli", "__version__"]
