#!/usr/bin/env python3
"""Tests for batch-mode Vivado execution with a mocked subprocess."""

import io
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from vivadofpgatool.exceptions import ScriptNotFoundError, ToolInvocationError
from vivadofpgatool.vivado_handling import vivado_runner
from vivadofpgatool.vivado_handling.result_extractor import (
    READBACK_FAILURE_MARKERS,
    FailureKind,
)
from vivadofpgatool.vivado_handling.vivado_locator import ToolInstallation
from vivadofpgatool.vivado_handling.vivado_runner import ExecutionResult, VivadoRunner


class FakeProcess:
    """Stands in for subprocess.Popen: yields canned output lines."""

    def __init__(self, output, returncode):
        self.stdout = io.StringIO(output)
        self.returncode = returncode

    def wait(self):
        return self.returncode

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.stdout.close()
        return False


def fake_popen(output="", returncode=0):
    calls = []

    def _popen(argv, **kwargs):
        calls.append((argv, kwargs))
        return FakeProcess(output, returncode)

    return _popen, calls


@pytest.fixture
def installation(fake_vivado):
    return ToolInstallation(fake_vivado, fake_vivado / "bin" / "vivado", "2025.1")


@pytest.fixture
def script(tmp_path):
    path = tmp_path / "scratch" / "flash.tcl"
    path.parent.mkdir()
    path.write_text("puts hello\n")
    return path


class TestInvoke:
    def test_success(self, installation, linux_platform, script):
        popen, calls = fake_popen("line one\nProgram Operation successful\n", 0)
        with patch.object(vivado_runner.subprocess, "Popen", popen):
            result = VivadoRunner(installation, linux_platform).invoke(script)

        assert result.succeeded
        assert result.exit_code == 0
        assert "Program Operation successful" in result.output

        argv, kwargs = calls[0]
        assert argv == [
            str(installation.executable_path),
            "-mode", "batch", "-notrace", "-source", "flash.tcl",
        ]
        assert kwargs["cwd"] == str(script.parent)
        assert kwargs["stderr"] == subprocess.STDOUT

    def test_output_is_appended_to_log_file(self, installation, linux_platform, script, tmp_path):
        log_file = tmp_path / "flash.log"
        log_file.write_text("existing\n")
        popen, _ = fake_popen("vivado says hi\n", 0)
        with patch.object(vivado_runner.subprocess, "Popen", popen):
            VivadoRunner(installation, linux_platform, log_file=log_file).invoke(script)
        assert log_file.read_text() == "existing\nvivado says hi\n"

    def test_line_handler_and_verbose_echo(self, installation, linux_platform, script):
        handled, echoed = [], []
        popen, _ = fake_popen("a\nb\n", 0)
        runner = VivadoRunner(installation, linux_platform, verbose=True, echo=echoed.append)
        with patch.object(vivado_runner.subprocess, "Popen", popen):
            runner.invoke(script, line_handler=handled.append)
        assert handled == ["a", "b"]
        assert echoed == ["a\n", "b\n"]

    def test_quiet_run_does_not_echo(self, installation, linux_platform, script):
        echoed = []
        popen, _ = fake_popen("a\n", 0)
        runner = VivadoRunner(installation, linux_platform, echo=echoed.append)
        with patch.object(vivado_runner.subprocess, "Popen", popen):
            runner.invoke(script)
        assert echoed == []

    def test_nonzero_exit_is_generic_failure(self, installation, linux_platform, script):
        popen, _ = fake_popen("ERROR: [Labtools 27-3165] End of startup status: LOW\n", 1)
        with patch.object(vivado_runner.subprocess, "Popen", popen):
            result = VivadoRunner(installation, linux_platform).invoke(script)
        assert not result.succeeded
        assert result.exit_code == 1
        assert result.failure is FailureKind.GENERIC

    def test_missing_script(self, installation, linux_platform, tmp_path):
        with pytest.raises(ScriptNotFoundError):
            VivadoRunner(installation, linux_platform).invoke(tmp_path / "none.tcl")

    def test_unstartable_process(self, installation, linux_platform, script):
        def broken(*args, **kwargs):
            raise FileNotFoundError("vivado")

        with patch.object(vivado_runner.subprocess, "Popen", broken):
            with pytest.raises(ToolInvocationError, match="Failed to start Vivado"):
                VivadoRunner(installation, linux_platform).invoke(script)


class TestExecutionResult:
    def test_classified_refines_generic_failure(self):
        result = ExecutionResult(1, "ERROR: Erase Operation failed\n", FailureKind.GENERIC)
        assert result.classified().failure is FailureKind.ERASE

    def test_classified_with_readback_markers(self):
        result = ExecutionResult(1, "ERROR: Cannot write output file\n", FailureKind.GENERIC)
        assert result.classified(READBACK_FAILURE_MARKERS).failure is FailureKind.FILE_IO

    def test_success_is_never_classified(self):
        result = ExecutionResult(0, "Erase failed? no, just a message")
        assert result.classified() is result
        assert result.succeeded


def test_wsl_invocation_uses_cmd(wsl_platform, script):
    installation = ToolInstallation(
        Path("/mnt/c/Xilinx/2025.1/Vivado"),
        Path("/mnt/c/Xilinx/2025.1/Vivado/bin/vivado.bat"),
    )
    invocation = VivadoRunner(installation, wsl_platform).build_invocation(script)
    assert invocation.argv[:2] == ["cmd.exe", "/c"]
    assert invocation.argv[2].endswith("-mode batch -notrace -source flash.tcl")
