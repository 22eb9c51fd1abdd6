#!/usr/bin/env python3
"""
Centralized stage/progress logging for tool commands.

Two output formats:

    human    [2/5] Generating Tcl script       (padded log line)
             Progress: 100%                    (carriage-return updated)
    machine  STAGE:2:Generating Tcl script
             PROGRESS:2:100
             STATUS:SUCCESS
             ERROR:5:Flash programming failed
"""

import logging
import sys
from enum import Enum
from typing import Optional, TextIO

from ..constants import TOTAL_STAGES
from ..string_utils import (
    log_debug_safe,
    log_error_safe,
    log_info_safe,
    log_warning_safe,
    safe_format,
)


class OutputFormat(str, Enum):
    HUMAN = "human"
    MACHINE = "machine"


class StageLogger:
    """Command logger with consistent prefixes and stage reporting."""

    # Standardized prefixes for the tool's subsystems
    PREFIXES = {
        "cli": "CLI",
        "board": "BOARD",
        "platform": "PLATFORM",
        "template": "TEMPLATE",
        "vivado": "VIVADO",
        "result": "RESULT",
        "usb": "USB",
        "scratch": "SCRATCH",
    }

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        output_format: OutputFormat = OutputFormat.HUMAN,
        quiet: bool = False,
        stream: Optional[TextIO] = None,
        total_stages: int = TOTAL_STAGES,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.output_format = OutputFormat(output_format)
        self.quiet = quiet
        self.stream = stream
        self.total_stages = total_stages
        self.current_stage = 0
        self._progress_open = False

    @property
    def machine(self) -> bool:
        return self.output_format is OutputFormat.MACHINE

    def _out(self) -> TextIO:
        return self.stream or sys.stdout

    def _emit(self, line: str) -> None:
        out = self._out()
        out.write(line + "\n")
        out.flush()

    def _end_progress(self) -> None:
        if self._progress_open:
            self._out().write("\n")
            self._progress_open = False

    def info(self, message: str, prefix: str = "CLI", **kwargs) -> None:
        """Log info message with consistent prefix."""
        if self.machine:
            self._emit("INFO:" + safe_format(message, **kwargs))
            return
        self._end_progress()
        prefix = self.PREFIXES.get(prefix.lower(), prefix)
        log_info_safe(self.logger, message, prefix=prefix, **kwargs)

    def warning(self, message: str, prefix: str = "CLI", **kwargs) -> None:
        """Log warning message with consistent prefix."""
        self._end_progress()
        prefix = self.PREFIXES.get(prefix.lower(), prefix)
        log_warning_safe(self.logger, message, prefix=prefix, **kwargs)

    def error(self, message: str, prefix: str = "CLI", **kwargs) -> None:
        """Log error message with consistent prefix."""
        self._end_progress()
        prefix = self.PREFIXES.get(prefix.lower(), prefix)
        log_error_safe(self.logger, message, prefix=prefix, **kwargs)

    def debug(self, message: str, prefix: str = "CLI", **kwargs) -> None:
        prefix = self.PREFIXES.get(prefix.lower(), prefix)
        log_debug_safe(self.logger, message, prefix=prefix, **kwargs)

    def success(self, message: str, **kwargs) -> None:
        if self.machine:
            self._emit("SUCCESS:" + safe_format(message, **kwargs))
            return
        self.info("✓ " + message, **kwargs)

    def stage(self, number: int, description: str) -> None:
        """Announce stage *number* of ``total_stages``."""
        self.current_stage = number
        if self.machine:
            self._emit(f"STAGE:{number}:{description}")
            return
        self.info(
            "[{number}/{total}] {description}",
            number=number,
            total=self.total_stages,
            description=description,
        )

    def progress(self, percent: int, stage: Optional[int] = None) -> None:
        stage = self.current_stage if stage is None else stage
        if self.machine:
            self._emit(f"PROGRESS:{stage}:{percent}")
            return
        if self.quiet:
            return
        self._out().write(f"\r  Progress: {percent}%   ")
        self._out().flush()
        self._progress_open = True

    def status(self, succeeded: bool) -> None:
        if self.machine:
            self._emit("STATUS:SUCCESS" if succeeded else "STATUS:FAILURE")
            return
        if succeeded:
            self.success("Operation completed successfully")
        else:
            self.error("Operation failed")

    def failure(self, exit_status: int, message: str) -> None:
        """Report a fatal error; in machine mode also the final failure status."""
        if self.machine:
            # One record per line in the machine protocol
            headline = message.splitlines()[0] if message else ""
            self._emit(f"ERROR:{exit_status}:{headline}")
            self._emit("STATUS:FAILURE")
            return
        self.error(message)

