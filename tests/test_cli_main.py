#!/usr/bin/env python3
"""Tests for the vivado-fpga-tool entry point."""

import functools
import logging

import pytest

from vivadofpgatool import fpga_tool_main
from vivadofpgatool.cli.commands import CommandContext
from vivadofpgatool.fpga_tool_main import _console_level, create_parser, main
from vivadofpgatool.vivado_handling.result_extractor import FailureKind
from vivadofpgatool.vivado_handling.vivado_runner import ExecutionResult


class StubRunner:
    def __init__(self, output, exit_code=0):
        self.output = output
        self.exit_code = exit_code
        self.calls = 0

    def __call__(self, installation, platform, verbose=False, log_file=None):
        return self

    def invoke(self, script, line_handler=None):
        self.calls += 1
        failure = None if self.exit_code == 0 else FailureKind.GENERIC
        return ExecutionResult(self.exit_code, self.output, failure)


@pytest.fixture
def patched_context(monkeypatch, tmp_path):
    """Make main() build contexts with a stub runner and no host probing."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("VIVADO_ROOT", raising=False)

    def _patch(runner):
        monkeypatch.setattr(
            fpga_tool_main,
            "CommandContext",
            functools.partial(
                CommandContext,
                runner_factory=runner,
                which=lambda _name: None,
                list_usb_devices=lambda: "",
            ),
        )
        return runner

    return _patch


def common_args(tmp_path, depends_dir):
    return [
        "--platform=linux",
        f"--depends={depends_dir}",
        f"--log={tmp_path / 'logs' / 'run.log'}",
    ]


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert "vivado-fpga-tool version" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "Commands:" in capsys.readouterr().out


def test_unknown_option():
    assert main(["info", "--bogus"]) == 1


def test_missing_board_in_machine_mode(capsys):
    assert main(["flash", "--file=fw.bin", "--format=machine"]) == 1
    out = capsys.readouterr().out.splitlines()
    assert out == ["ERROR:1:Flash command requires --board=<name>", "STATUS:FAILURE"]


def test_invalid_platform():
    assert main(["info", "--platform=macos"]) == 9


def test_board_not_found(tmp_path, depends_dir, patched_context):
    runner = patched_context(StubRunner(""))
    args = ["info", "--board=no-such-board", "--vivado=/opt/none"]
    assert main(args + common_args(tmp_path, depends_dir)) == 1
    assert runner.calls == 0


def test_vivado_not_found(tmp_path, depends_dir, write_board, patched_context):
    write_board()
    runner = patched_context(StubRunner(""))
    args = ["info", "--board=xc7s50-is25lp128f"]
    assert main(args + common_args(tmp_path, depends_dir)) == 7
    assert runner.calls == 0


def test_info_machine_mode(tmp_path, depends_dir, fake_vivado, patched_context, capsys):
    runner = patched_context(StubRunner("Found 1 device(s)\n  Part Name: xc7s50\n"))
    args = ["info", f"--vivado={fake_vivado}", "--format=machine"]

    assert main(args + common_args(tmp_path, depends_dir)) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "STAGE:1:Connecting to FPGA"
    assert "STATUS:SUCCESS" in out
    assert "INFO:FPGA detected: xc7s50" in out
    # Log records stay out of the protocol stream
    assert all(":" in line and line.split(":")[0].isupper() for line in out)

    log_text = (tmp_path / "logs" / "run.log").read_text()
    assert "Command: info" in log_text


def test_flash_failure_exit_status(tmp_path, depends_dir, fake_vivado, write_board, patched_context):
    write_board()
    firmware = tmp_path / "fw.bin"
    firmware.write_bytes(b"\x00" * 16)
    patched_context(StubRunner("ERROR: Flash program failed: timeout\n", exit_code=1))
    args = [
        "flash",
        "--board=xc7s50-is25lp128f",
        f"--file={firmware}",
        f"--vivado={fake_vivado}",
    ]
    assert main(args + common_args(tmp_path, depends_dir)) == 5


class TestConsoleLevel:
    @pytest.mark.parametrize(
        "argv, level",
        [
            (["info"], logging.INFO),
            (["info", "-v"], logging.DEBUG),
            (["info", "-q"], logging.ERROR),
            (["info", "--format=machine"], logging.CRITICAL),
            (["info", "--format=machine", "-v"], logging.DEBUG),
        ],
    )
    def test_levels(self, argv, level):
        assert _console_level(create_parser().parse_args(argv)) == level
