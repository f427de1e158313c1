"""Unit tests for the CLI: command registration, argument wiring, exit codes.

Commands run against the in-memory recording agent, injected through the
``CliContext`` object passed to ``CliRunner.invoke``.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from fpgaloader.cli.app import app
from fpgaloader.cli.runtime import CliContext
from fpgaloader.config import LoaderConfig
from fpgaloader.core.errors import TransportError

runner = CliRunner()


@pytest.fixture
def cli_obj(agent):
    """CliContext whose factory hands out the recording agent."""
    return CliContext(
        settings=LoaderConfig(_env_file=None),
        agent_factory=lambda settings: agent,
    )


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in (
            "bitdownload",
            "overlay",
            "register-accel",
            "unregister-accel",
            "load",
            "unload",
            "dts2dtbo",
        ):
            assert command in result.output

    @pytest.mark.parametrize("command", ["bitdownload", "overlay", "register-accel", "dts2dtbo"])
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0


# ---------------------------------------------------------------------------
# Test: commands against the recording agent
# ---------------------------------------------------------------------------


class TestCommands:
    def test_bitdownload(self, cli_obj, agent, workspace: Path):
        result = runner.invoke(app, ["bitdownload", str(workspace / "design.bit")], obj=cli_obj)
        assert result.exit_code == 0, result.output
        assert "Bitstream downloaded successfully" in result.output
        assert agent.removed() == ["design.bit"]
        assert agent.closed

    def test_overlay_with_bit(self, cli_obj, agent, workspace: Path):
        result = runner.invoke(
            app,
            ["overlay", str(workspace / "overlay.dts"), "--bit", str(workspace / "design.bit")],
            obj=cli_obj,
        )
        assert result.exit_code == 0, result.output
        assert agent.removed() == ["design.bit", "design.bit.bin", "overlay.dts.dtbo"]

    def test_overlay_bit_and_bin_rejected(self, cli_obj, agent, workspace: Path):
        result = runner.invoke(
            app,
            [
                "overlay", str(workspace / "overlay.dtbo"),
                "--bit", str(workspace / "design.bit"),
                "--bin", str(workspace / "design.bin"),
            ],
            obj=cli_obj,
        )
        assert result.exit_code == 2
        assert agent.calls == []

    def test_overlay_cleanup_warning_keeps_success(self, cli_obj, agent, workspace: Path):
        agent.fail_remove = {"overlay.dtbo"}
        result = runner.invoke(app, ["overlay", str(workspace / "overlay.dtbo")], obj=cli_obj)
        assert result.exit_code == 0
        assert "Warning" in result.output

    def test_register_accel_with_json(self, cli_obj, agent, workspace: Path):
        result = runner.invoke(
            app,
            [
                "register-accel", "myaccel",
                str(workspace / "overlay.dts"), str(workspace / "design.bit"),
                "--json", str(workspace / "accel.json"),
            ],
            obj=cli_obj,
        )
        assert result.exit_code == 0, result.output
        register = next(c for c in agent.calls if c[0] == "register_accelerator")
        assert register[1:] == ("myaccel", "design.bit.bin", "overlay.dtbo", "accel.json", True)

    def test_unregister(self, cli_obj, agent):
        result = runner.invoke(app, ["unregister-accel", "myaccel"], obj=cli_obj)
        assert result.exit_code == 0
        assert agent.calls == [("unregister_accelerator", "myaccel")]

    def test_load_prints_slot(self, cli_obj, agent):
        agent.slot = 1
        result = runner.invoke(app, ["load", "myaccel"], obj=cli_obj)
        assert result.exit_code == 0
        assert "slot 1" in result.output

    def test_load_rejected_exits_1(self, cli_obj, agent):
        agent.reject.add("load_accelerator")
        result = runner.invoke(app, ["load", "myaccel"], obj=cli_obj)
        assert result.exit_code == 1
        assert "Failed (load)" in result.output

    def test_unload_default_slot(self, cli_obj, agent):
        result = runner.invoke(app, ["unload"], obj=cli_obj)
        assert result.exit_code == 0
        assert agent.calls == [("unload_accelerator", 0)]

    def test_unload_explicit_slot(self, cli_obj, agent):
        result = runner.invoke(app, ["unload", "2"], obj=cli_obj)
        assert result.exit_code == 0
        assert agent.calls == [("unload_accelerator", 2)]

    def test_dts2dtbo(self, cli_obj, agent, workspace: Path):
        out = workspace / "out.dtbo"
        result = runner.invoke(
            app, ["dts2dtbo", str(workspace / "overlay.dts"), str(out)], obj=cli_obj
        )
        assert result.exit_code == 0, result.output
        assert out.read_bytes() == agent.overlay_bytes

    def test_transport_error_exits_1(self, cli_obj, agent, workspace: Path):
        agent.fail["load_bitstream"] = TransportError("load_bitstream", "agent unreachable")
        result = runner.invoke(app, ["bitdownload", str(workspace / "design.bit")], obj=cli_obj)
        assert result.exit_code == 1
        assert "agent unreachable" in result.output
        assert agent.removed() == []


class TestGlobalOptions:
    def test_ip_option_overrides_server(self, agent):
        seen: list[str] = []

        def _factory(settings: LoaderConfig):
            seen.append(settings.server)
            return agent

        obj = CliContext(settings=LoaderConfig(_env_file=None), agent_factory=_factory)
        result = runner.invoke(app, ["--ip", "192.168.1.7:8051", "unload"], obj=obj)
        assert result.exit_code == 0
        assert seen == ["192.168.1.7:8051"]

    def test_default_server(self, agent):
        seen: list[str] = []

        def _factory(settings: LoaderConfig):
            seen.append(settings.server)
            return agent

        obj = CliContext(settings=LoaderConfig(_env_file=None), agent_factory=_factory)
        runner.invoke(app, ["unload"], obj=obj)
        assert seen == ["127.0.0.1:8051"]

    def test_log_level_option_is_case_insensitive(self, agent):
        seen: list[str] = []

        def _factory(settings: LoaderConfig):
            seen.append(settings.log_level)
            return agent

        obj = CliContext(settings=LoaderConfig(_env_file=None), agent_factory=_factory)
        result = runner.invoke(app, ["--log-level", "debug", "unload"], obj=obj)
        assert result.exit_code == 0, result.output
        assert seen == ["DEBUG"]

    def test_unknown_log_level_exits_1(self, cli_obj, agent):
        result = runner.invoke(app, ["--log-level", "chatty", "unload"], obj=cli_obj)
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert agent.calls == []


class TestEnvironmentSettings:
    def test_settings_loaded_from_env(self, monkeypatch, agent):
        monkeypatch.setenv("FPGALOADER_SERVER", "10.0.0.9:8051")
        seen: list[str] = []

        def _factory(settings: LoaderConfig):
            seen.append(settings.server)
            return agent

        result = runner.invoke(app, ["unload"], obj=CliContext(agent_factory=_factory))
        assert result.exit_code == 0, result.output
        assert seen == ["10.0.0.9:8051"]

    def test_bad_env_value_exits_1(self, monkeypatch, agent):
        monkeypatch.setenv("FPGALOADER_REQUEST_TIMEOUT_SECONDS", "soon")
        result = runner.invoke(
            app, ["unload"], obj=CliContext(agent_factory=lambda settings: agent)
        )
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert "request_timeout_seconds" in result.output
        assert agent.calls == []

    def test_bad_env_value_does_not_break_help(self, monkeypatch):
        monkeypatch.setenv("FPGALOADER_REQUEST_TIMEOUT_SECONDS", "soon")
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "bitdownload" in result.output

    def test_bad_log_level_env_exits_1(self, monkeypatch, agent):
        monkeypatch.setenv("FPGALOADER_LOG_LEVEL", "verbose")
        result = runner.invoke(
            app, ["unload"], obj=CliContext(agent_factory=lambda settings: agent)
        )
        assert result.exit_code == 1
        assert "log_level" in result.output
