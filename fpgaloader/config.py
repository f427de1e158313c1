"""Runtime configuration: env-driven.

Centralized config using pydantic-settings. Reads from a .env file and
FPGALOADER_* environment variables; CLI options override both.
"""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class LoaderConfig(BaseSettings):
    """Loader configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export FPGALOADER_SERVER=192.168.0.20:8051
        export FPGALOADER_PLATFORM=zynq
        export FPGALOADER_LOG_LEVEL=DEBUG

    Or via .env file::

        FPGALOADER_REQUEST_TIMEOUT_SECONDS=30
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FPGALOADER_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote agent
    server: str = "127.0.0.1:8051"
    request_timeout_seconds: float | None = None  # None waits indefinitely

    # Bitstream -> binary image conversion target (KV260 is zynqmp)
    platform: str = "zynqmp"

    # Cleanup-eligible flag sent with every register call
    cleanup_eligible: bool = True

    log_level: LogLevel = "WARNING"
