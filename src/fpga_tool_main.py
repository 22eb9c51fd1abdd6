#!/usr/bin/env python3
"""
vivado-fpga-tool - Vivado FPGA SPI Flash Tool

Command line entry point: parse options, set up logging, run one command.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .board.registry import BoardRegistry
from .cli.commands import CommandContext, run_command
from .cli.config import COMMANDS, CommandConfig, resolve_depends_dir
from .exceptions import EXIT_INVALID_ARGS, InvalidArgumentsError, VivadoToolError
from .host.detector import resolve_platform
from .log_config import get_logger, init_log_file, setup_logging
from .string_utils import log_debug_safe, log_info_safe, log_warning_safe
from .utils.stage_logger import OutputFormat, StageLogger
from .utils.version_resolver import get_package_version

logger = get_logger(__name__)

EPILOG = """
Commands:
  flash       Program SPI flash with binary file
  dump        Read SPI flash to binary file
  verify      Verify SPI flash contents against a binary file
  info        Display FPGA and flash information (auto-detects if no board specified)

Note: Create boards/default.conf to set the default Vivado path
(see boards/default.conf.example)

Examples:
  # Auto-detect connected FPGAs
  vivado-fpga-tool info                                       # Uses boards/default.conf
  vivado-fpga-tool info --vivado=/mnt/c/Xilinx/2025.1/Vivado # Override Vivado path
  vivado-fpga-tool info --board=xc7s50-is25lp128f            # Uses board config

  # Flash programming
  vivado-fpga-tool flash --board=xc7s50-is25lp128f --file=firmware.bin --verify

  # Dump flash contents
  vivado-fpga-tool dump --board=xc7s50-is25lp128f --file=backup.bin

  # Compare flash contents with a file
  vivado-fpga-tool verify --board=xc7s50-is25lp128f --file=firmware.bin

Environment Variables:
  VIVADO_ROOT              Vivado installation used when no other path is given
  VIVADO_FPGA_TOOL_HOME    Dependency directory containing boards/
  LOG_DIR                  Directory for per-command log files
"""


class ToolArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors as InvalidArgumentsError."""

    def error(self, message):
        raise InvalidArgumentsError(
            f"{message}\n\nUse --help for usage information."
        )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = ToolArgumentParser(
        prog="vivado-fpga-tool",
        description="vivado-fpga-tool - Vivado FPGA SPI Flash Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument(
        "command",
        nargs="?",
        metavar="<command>",
        help="One of: " + ", ".join(COMMANDS),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"vivado-fpga-tool version {get_package_version()}",
    )
    parser.add_argument(
        "--board",
        metavar="<name>",
        help="Board configuration name (required for flash/dump/verify, optional for info)",
    )
    parser.add_argument(
        "--vivado",
        dest="tool_path",
        metavar="<path>",
        help="Vivado installation path (or set VIVADO_PATH in boards/default.conf)",
    )
    parser.add_argument(
        "--depends", metavar="<path>", help="Override dependency directory"
    )
    parser.add_argument(
        "--platform", metavar="<type>", help="Platform type (wsl2|linux|windows)"
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        default=OutputFormat.HUMAN.value,
        metavar="<type>",
        help="Output format (human|machine)",
    )
    parser.add_argument("--log", dest="log_path", metavar="<path>", help="Custom log file path")
    parser.add_argument(
        "--file",
        metavar="<path>",
        help="Binary file to program or verify, or output file for dump",
    )
    parser.add_argument(
        "--size",
        metavar="<size>",
        help="Flash size to read (e.g., 16M, 128K); defaults to the board config",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Verify flash contents after programming",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Detailed debug output"
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true", help="Minimal output (status only)"
    )
    return parser


def _console_level(args: argparse.Namespace) -> int:
    # Machine mode keeps stdout for protocol lines only
    if args.output_format == OutputFormat.MACHINE.value and not args.verbose:
        return logging.CRITICAL
    if args.verbose:
        return logging.DEBUG
    if args.quiet:
        return logging.ERROR
    return logging.INFO


def build_config(args: argparse.Namespace) -> CommandConfig:
    return CommandConfig(
        command=args.command,
        board=args.board,
        tool_path=args.tool_path,
        depends=args.depends,
        platform=args.platform,
        output_format=args.output_format,
        log_path=args.log_path,
        verbose=args.verbose,
        quiet=args.quiet,
        file=args.file,
        verify=args.verify,
        size=args.size,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit status."""
    parser = create_parser()
    try:
        args = parser.parse_args(argv)
    except InvalidArgumentsError as e:
        setup_logging(level=logging.ERROR)
        StageLogger(logger).failure(e.exit_status, e.message)
        return e.exit_status

    if not args.command:
        parser.print_help()
        return 0

    level = _console_level(args)
    setup_logging(level=level)
    stages = StageLogger(
        logger,
        output_format=(
            OutputFormat.MACHINE
            if args.output_format == OutputFormat.MACHINE.value
            else OutputFormat.HUMAN
        ),
        quiet=args.quiet,
    )

    try:
        config = build_config(args)
        log_file = init_log_file(config.command, config.log_path)
        setup_logging(level=level, log_file=log_file)

        platform = resolve_platform(config.platform)
        depends_dir = resolve_depends_dir(config.depends)

        log_debug_safe(
            logger, "vivado-fpga-tool version {version}",
            prefix="CLI", version=get_package_version(),
        )
        log_debug_safe(logger, "Command: {command}", prefix="CLI", command=config.command)
        log_debug_safe(logger, "Platform: {platform}", prefix="CLI", platform=platform.kind.value)
        log_debug_safe(logger, "Depends dir: {path}", prefix="CLI", path=depends_dir)

        ctx = CommandContext(
            config=config,
            platform=platform,
            registry=BoardRegistry(depends_dir=depends_dir),
            stages=stages,
            log_file=log_file,
        )
        result = run_command(ctx)

        log_debug_safe(logger, "Command completed successfully", prefix="CLI")
        log_info_safe(logger, "Log file: {path}", prefix="CLI", path=log_file)
        return result.exit_status

    except VivadoToolError as e:
        stages.failure(e.exit_status, e.message)
        return e.exit_status
    except KeyboardInterrupt:
        log_warning_safe(logger, "Operation interrupted by user", prefix="CLI")
        return EXIT_INVALID_ARGS


if __name__ == "__main__":
    sys.exit(main())
