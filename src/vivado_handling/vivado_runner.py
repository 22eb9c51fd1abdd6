#!/usr/bin/env python3
"""
VivadoRunner: batch-mode execution of a rendered Tcl script.

The script runs with its own directory as the working directory. Under
WSL2 the command goes through ``cmd.exe`` with every path translated to
its Windows form. Merged stdout/stderr is streamed line by line: always
appended to the log file, echoed to the console in verbose mode, and
offered to an optional line handler for progress parsing.
"""

import logging
import subprocess
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, List, Optional, TextIO, Union

from ..constants import VIVADO_BATCH_FLAGS
from ..exceptions import ScriptNotFoundError, ToolInvocationError
from ..host.detector import PlatformContext
from ..string_utils import (
    log_debug_safe,
    log_error_safe,
    log_info_safe,
    safe_format,
)
from .result_extractor import FLASH_FAILURE_MARKERS, FailureKind, MarkerList, classify
from .vivado_locator import ToolInstallation

logger = logging.getLogger(__name__)

LineHandler = Callable[[str], None]


@dataclass(frozen=True)
class ExecutionResult:
    """Exit code and full merged output of one Vivado run."""

    exit_code: int
    output: str
    failure: Optional[FailureKind] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    def classified(self, markers: MarkerList = FLASH_FAILURE_MARKERS) -> "ExecutionResult":
        """Refine a generic failure using the output markers."""
        if self.failure is not FailureKind.GENERIC:
            return self
        return replace(self, failure=classify(self.output, markers))


class VivadoRunner:
    """
    Runs Vivado for one command.

    Attributes:
        installation: resolved Vivado installation
        platform: active platform context
        verbose: echo Vivado output to the console
        log_file: file the raw output is appended to (optional)
    """

    def __init__(
        self,
        installation: ToolInstallation,
        platform: PlatformContext,
        verbose: bool = False,
        log_file: Optional[Union[str, Path]] = None,
        echo: Optional[Callable[[str], None]] = None,
        prefix: str = "VIVADO",
    ):
        self.installation = installation
        self.platform = platform
        self.verbose = verbose
        self.log_file = Path(log_file) if log_file else None
        self.echo = echo or _write_stdout
        self.prefix = prefix

    def build_invocation(self, script: Path):
        args = [*VIVADO_BATCH_FLAGS, script.name]
        return self.platform.strategy.wrap_invocation(
            str(self.installation.executable_path), args, script.parent
        )

    def invoke(
        self, script: Union[str, Path], line_handler: Optional[LineHandler] = None
    ) -> ExecutionResult:
        """
        Run *script* in batch mode and wait for Vivado to exit.

        Raises:
            ScriptNotFoundError: If *script* does not exist
            ToolInvocationError: If the process cannot be started
        """
        script = Path(script)
        if not script.is_file():
            raise ScriptNotFoundError(
                safe_format("Tcl script not found: {path}", path=script)
            )

        invocation = self.build_invocation(script)
        log_info_safe(logger, "Executing Vivado in batch mode...", prefix=self.prefix)
        log_debug_safe(logger, "Tcl script: {path}", prefix=self.prefix, path=script)
        log_debug_safe(
            logger, "Working directory: {cwd}", prefix=self.prefix, cwd=invocation.cwd
        )
        log_debug_safe(
            logger,
            "Executing: {cmd}",
            prefix=self.prefix,
            cmd=" ".join(invocation.argv),
        )

        sink: Optional[TextIO] = None
        if self.log_file is not None:
            sink = open(self.log_file, "a", encoding="utf-8")
        try:
            exit_code, lines = self._stream(invocation, sink, line_handler)
        finally:
            if sink is not None:
                sink.close()

        output = "".join(lines)
        if exit_code != 0:
            log_error_safe(
                logger,
                "Vivado execution failed with exit code: {code}",
                prefix=self.prefix,
                code=exit_code,
            )
            if self.log_file is not None:
                log_error_safe(
                    logger,
                    "Check log file for details: {path}",
                    prefix=self.prefix,
                    path=self.log_file,
                )
            return ExecutionResult(exit_code, output, FailureKind.GENERIC)

        log_debug_safe(logger, "Vivado execution completed successfully", prefix=self.prefix)
        return ExecutionResult(exit_code, output)

    def _stream(self, invocation, sink, line_handler):
        lines: List[str] = []
        try:
            process = subprocess.Popen(
                invocation.argv,
                cwd=str(invocation.cwd),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ToolInvocationError(
                safe_format(
                    "Failed to start Vivado ({exe}): {error}",
                    exe=invocation.argv[0],
                    error=e,
                )
            ) from e

        with process:
            for line in process.stdout:
                lines.append(line)
                if sink is not None:
                    sink.write(line)
                    sink.flush()
                if self.verbose:
                    self.echo(line)
                if line_handler is not None:
                    line_handler(line.rstrip("\n"))
            exit_code = process.wait()
        return exit_code, lines


def _write_stdout(line: str) -> None:
    sys.stdout.write(line)
    sys.stdout.flush()

