#!/usr/bin/env python3
"""Configuration dataclass for one vivado-fpga-tool command."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from ..constants import BOARDS_DIRNAME, ENV_TOOL_HOME, INSTALL_SHARE_DIR, PACKAGE_DIR
from ..exceptions import InvalidArgumentsError
from ..host.detector import platform_from_name
from ..string_utils import safe_format
from ..utils.stage_logger import OutputFormat
from ..utils.validators import SIZE_RE

COMMANDS = ("info", "flash", "dump", "verify")

# Commands that cannot run without a board profile and a file
BOARD_COMMANDS = ("flash", "dump", "verify")


@dataclass
class CommandConfig:
    """Strongly-typed options for a single command invocation."""

    command: str

    # Global options
    board: Optional[str] = None
    tool_path: Optional[str] = None
    depends: Optional[str] = None
    platform: Optional[str] = None
    output_format: str = OutputFormat.HUMAN.value
    log_path: Optional[str] = None
    verbose: bool = False
    quiet: bool = False

    # Command-specific options
    file: Optional[str] = None
    verify: bool = False
    size: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.command not in COMMANDS:
            raise InvalidArgumentsError(
                safe_format(
                    "Unknown command: {command}\n\nUse --help for usage information.",
                    command=self.command,
                )
            )

        try:
            OutputFormat(self.output_format)
        except ValueError:
            raise InvalidArgumentsError(
                safe_format(
                    "Invalid output format: {fmt} (valid: human, machine)",
                    fmt=self.output_format,
                )
            ) from None

        # Raises PlatformError for anything but wsl2/linux/windows
        if self.platform:
            platform_from_name(self.platform)

        if self.size is not None and not SIZE_RE.fullmatch(self.size):
            raise InvalidArgumentsError(
                safe_format(
                    "Invalid size: {size} (expected format: 16M, 128K, etc.)",
                    size=self.size,
                )
            )

        if self.command in BOARD_COMMANDS:
            title = self.command.capitalize()
            if not self.board:
                raise InvalidArgumentsError(
                    f"{title} command requires --board=<name>"
                )
            if not self.file:
                raise InvalidArgumentsError(f"{title} command requires --file=<path>")

    @property
    def format(self) -> OutputFormat:
        return OutputFormat(self.output_format)


def resolve_depends_dir(
    explicit: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    install_share_dir: str = INSTALL_SHARE_DIR,
) -> Path:
    """
    Dependency root, the third board search location.

    Priority: --depends > $VIVADO_FPGA_TOOL_HOME > install share dir >
    the package directory (portable mode).

    Raises:
        InvalidArgumentsError: If the chosen directory has no ``boards/``
    """
    environ = os.environ if environ is None else environ
    depends_dir = Path(
        explicit or environ.get(ENV_TOOL_HOME) or install_share_dir or PACKAGE_DIR
    )
    if not (depends_dir / BOARDS_DIRNAME).is_dir():
        raise InvalidArgumentsError(
            safe_format(
                "Invalid dependency directory: {path}\nExpected to find: {expected}/",
                path=depends_dir,
                expected=depends_dir / BOARDS_DIRNAME,
            )
        )
    return depends_dir
