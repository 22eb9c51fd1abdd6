#!/usr/bin/env python3
"""
Command orchestration: board -> device id -> Tcl script -> Vivado -> result.

Every command follows the same stages:
    1. load the board profile and locate Vivado
    2. render the command's Tcl script into a scratch directory
    3. run Vivado in batch mode
    4. interpret the output
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from rich.console import Console
from rich.table import Table

from ..board.device_id import derive_device_id, get_fpga_family
from ..board.profile import BoardProfile
from ..board.registry import BoardRegistry
from ..exceptions import (
    FileIOError,
    FlashVerifyError,
    FpgaConnectError,
    InvalidArgumentsError,
    ToolInvocationError,
)
from ..host.detector import PlatformContext
from ..host.usb import _list_usb_devices, check_usb_attachment
from ..string_utils import format_size_short, safe_format
from ..templating.tcl_builder import TclScriptBuilder, TclScriptType
from ..templating.template_renderer import TemplateRenderer
from ..utils.scratch import scratch_directory
from ..utils.stage_logger import StageLogger
from ..vivado_handling.result_extractor import (
    FLASH_FAILURE_MARKERS,
    READBACK_FAILURE_MARKERS,
    DetectedInfo,
    FailureKind,
    MarkerList,
    ProgressParser,
    extract_detected_info,
    failure_to_error,
)
from ..vivado_handling.vivado_locator import ToolInstallation, VivadoLocator
from ..vivado_handling.vivado_runner import ExecutionResult, VivadoRunner
from .config import CommandConfig

logger = logging.getLogger(__name__)


@dataclass
class CommandContext:
    """Everything one command needs; built once by the CLI entry point."""

    config: CommandConfig
    platform: PlatformContext
    registry: BoardRegistry
    stages: StageLogger
    log_file: Optional[Path] = None
    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)
    which: Callable[[str], Optional[str]] = shutil.which
    list_usb_devices: Callable[[], str] = _list_usb_devices
    runner_factory: Callable[..., VivadoRunner] = VivadoRunner
    renderer: Optional[TemplateRenderer] = None
    console: Optional[Console] = None


@dataclass
class CommandResult:
    exit_status: int = 0
    detected: Optional[DetectedInfo] = None
    output_file: Optional[Path] = None
    size_bytes: Optional[int] = None


def _locate_tool(ctx: CommandContext, board_tool_path: Optional[str]) -> ToolInstallation:
    installation = VivadoLocator(
        ctx.platform,
        cli_path=ctx.config.tool_path,
        board_path=board_tool_path,
        environ=ctx.environ,
        which=ctx.which,
    ).locate()
    check_usb_attachment(ctx.platform, list_devices=ctx.list_usb_devices)
    return installation


def _load_board(ctx: CommandContext) -> BoardProfile:
    profile = ctx.registry.load(ctx.config.board)
    # Fail on unparsable part names before Vivado is involved
    device_id = derive_device_id(profile)
    ctx.stages.debug("FPGA device: {device}", prefix="board", device=device_id)
    return profile


def _board_tool_path(ctx: CommandContext, profile: BoardProfile) -> Optional[str]:
    return profile.tool_path or ctx.registry.load_default()


def _run_script(
    ctx: CommandContext,
    installation: ToolInstallation,
    script_type: TclScriptType,
    render: Callable[[TclScriptBuilder], str],
    stage_description: str,
    hint: str,
) -> ExecutionResult:
    """Render one script into a fresh scratch dir and run it."""
    with scratch_directory(ctx.platform) as scratch:
        result, _ = _run_in_scratch(
            ctx, installation, scratch, script_type, render, stage_description, hint
        )
    return result


def _run_in_scratch(ctx, installation, scratch, script_type, render, stage_description, hint):
    builder = TclScriptBuilder(ctx.platform, ctx.renderer, output_dir=scratch)
    ctx.stages.stage(2, stage_description)
    script = builder.write(script_type, render(builder))

    ctx.stages.stage(3, "Executing Vivado Hardware Manager")
    ctx.stages.info(hint)
    runner = ctx.runner_factory(
        installation,
        ctx.platform,
        verbose=ctx.config.verbose,
        log_file=ctx.log_file,
    )
    result = runner.invoke(script, line_handler=ProgressParser(ctx.stages.progress))
    return result, builder


def _raise_for_failure(
    ctx: CommandContext,
    result: ExecutionResult,
    markers: MarkerList,
    generic_message: str,
) -> None:
    if result.succeeded:
        return
    kind = result.classified(markers).failure
    log_file = str(ctx.log_file) if ctx.log_file else None
    if kind is FailureKind.GENERIC:
        message = generic_message
        if log_file:
            message += f"\nCheck log file for details: {log_file}"
        raise ToolInvocationError(message)
    raise failure_to_error(kind, log_file=log_file)


def _check_readable(path: Path) -> None:
    if not path.is_file() or not os.access(path, os.R_OK):
        raise FileIOError(
            safe_format("Binary file not found or not readable: {path}", path=path)
        )


def _report_detected(
    ctx: CommandContext, detected: DetectedInfo, profile: Optional[BoardProfile] = None
) -> None:
    rows = []
    if profile is not None:
        rows.append(("Board", profile.name))
        rows.append(("FPGA family", get_fpga_family(profile.fpga_part)))
        rows.append(("FPGA device", derive_device_id(profile)))
    if detected.device_count is not None:
        rows.append(("Devices found", str(detected.device_count)))
    if detected.fpga_part:
        rows.append(("FPGA detected", ", ".join(detected.fpga_parts)))
    if detected.flash_part:
        rows.append(("Flash detected", detected.flash_part))

    for label, value in rows:
        ctx.stages.debug("{label}: {value}", prefix="result", label=label, value=value)

    if ctx.stages.machine or ctx.config.quiet:
        for label, value in rows:
            ctx.stages.info("{label}: {value}", label=label, value=value)
        return

    table = Table(title="Detected hardware", show_lines=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    for label, value in rows:
        table.add_row(label, value)

    console = ctx.console or Console()
    if len(table.rows) > 0:
        console.print(table)
    else:
        console.print("[dim]No hardware identifiers found in Vivado output[/dim]")


def run_info(ctx: CommandContext) -> CommandResult:
    """Show FPGA/flash identification; auto-detects when no board is given."""
    stages = ctx.stages
    stages.stage(1, "Connecting to FPGA")

    if not ctx.config.board:
        stages.info("No board specified - running auto-detection mode")
        installation = _locate_tool(ctx, ctx.registry.load_default())
        result = _run_script(
            ctx,
            installation,
            TclScriptType.AUTODETECT,
            lambda builder: builder.render_autodetect(),
            "Generating auto-detect Tcl script",
            "This may take a few moments...",
        )
        if not result.succeeded:
            raise FpgaConnectError("Failed to detect FPGA devices")
        profile = None
    else:
        profile = _load_board(ctx)
        installation = _locate_tool(ctx, _board_tool_path(ctx, profile))
        result = _run_script(
            ctx,
            installation,
            TclScriptType.INFO,
            lambda builder: builder.render_board_info(profile),
            "Generating Tcl script",
            "This may take a few moments...",
        )
        if not result.succeeded:
            raise FpgaConnectError("Failed to detect FPGA/Flash")

    stages.stage(4, "Processing results")
    detected = extract_detected_info(result.output)
    stages.status(True)
    _report_detected(ctx, detected, profile)
    return CommandResult(detected=detected)


def run_flash(ctx: CommandContext) -> CommandResult:
    """Program the board's SPI flash with ``--file``."""
    config, stages = ctx.config, ctx.stages
    binary = Path(config.file).expanduser()
    _check_readable(binary)

    stages.stage(1, "Initializing flash operation")
    stages.info("Board: {board}", board=config.board)
    stages.info("Binary file: {file}", file=binary)
    stages.info("Verify: {state}", state="enabled" if config.verify else "disabled")

    profile = _load_board(ctx)
    installation = _locate_tool(ctx, _board_tool_path(ctx, profile))

    # Vivado runs from the scratch dir, so the path must be absolute
    binary = binary.resolve()
    result = _run_script(
        ctx,
        installation,
        TclScriptType.FLASH,
        lambda builder: builder.render_program_flash(profile, binary, config.verify),
        "Generating flash Tcl script",
        "This may take several minutes depending on file size...",
    )

    stages.stage(4, "Processing results")
    _raise_for_failure(ctx, result, FLASH_FAILURE_MARKERS, "Flash programming failed")

    stages.status(True)
    stages.success("Flash programming completed successfully")
    if config.verify:
        stages.info("Flash verification: PASSED")
    stages.info("Power cycle the board to boot from the new flash image")
    return CommandResult(size_bytes=binary.stat().st_size)


def run_dump(ctx: CommandContext) -> CommandResult:
    """Read the board's SPI flash back into ``--file``."""
    config, stages = ctx.config, ctx.stages
    stages.stage(1, "Initializing flash readback operation")
    stages.info("Board: {board}", board=config.board)
    stages.info("Output file: {file}", file=config.file)

    profile = _load_board(ctx)
    readback_size = config.size or profile.default_flash_size
    stages.info("Readback size: {size}", size=readback_size)

    installation = _locate_tool(ctx, _board_tool_path(ctx, profile))

    output = Path(config.file).expanduser().resolve()
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileIOError(
            safe_format("Cannot create output directory: {path}", path=output.parent)
        ) from e

    result = _run_script(
        ctx,
        installation,
        TclScriptType.DUMP,
        lambda builder: builder.render_read_flash(profile, output, readback_size),
        "Generating dump Tcl script",
        "This may take several minutes depending on flash size...",
    )

    stages.stage(4, "Processing results")
    _raise_for_failure(ctx, result, READBACK_FAILURE_MARKERS, "Flash readback failed")

    stages.status(True)
    stages.success("Flash readback completed successfully")
    size_bytes = None
    if output.is_file():
        size_bytes = output.stat().st_size
        stages.info(
            "Output file size: {size} bytes ({short})",
            size=size_bytes,
            short=format_size_short(size_bytes),
        )
    return CommandResult(output_file=output, size_bytes=size_bytes)


def _first_difference(expected: bytes, actual: bytes) -> int:
    for offset, (a, b) in enumerate(zip(expected, actual)):
        if a != b:
            return offset
    return min(len(expected), len(actual))


def run_verify(ctx: CommandContext) -> CommandResult:
    """Read back ``len(--file)`` bytes and compare them with the file."""
    config, stages = ctx.config, ctx.stages
    binary = Path(config.file).expanduser()
    _check_readable(binary)
    expected = binary.read_bytes()
    if not expected:
        raise InvalidArgumentsError(
            safe_format("Binary file is empty: {path}", path=binary)
        )

    stages.stage(1, "Initializing flash verification")
    stages.info("Board: {board}", board=config.board)
    stages.info("Binary file: {file}", file=binary)

    profile = _load_board(ctx)
    installation = _locate_tool(ctx, _board_tool_path(ctx, profile))

    with scratch_directory(ctx.platform) as scratch:
        readback = scratch / "readback.bin"
        result, _builder = _run_in_scratch(
            ctx,
            installation,
            scratch,
            TclScriptType.DUMP,
            lambda builder: builder.render_read_flash(
                profile, readback, str(len(expected))
            ),
            "Generating readback Tcl script",
            "This may take several minutes depending on file size...",
        )
        stages.stage(4, "Comparing flash contents")
        _raise_for_failure(ctx, result, READBACK_FAILURE_MARKERS, "Flash readback failed")
        if not readback.is_file():
            raise FileIOError(
                safe_format("Readback file was not created: {path}", path=readback)
            )
        actual = readback.read_bytes()

    if actual[: len(expected)] != expected:
        offset = _first_difference(expected, actual)
        raise FlashVerifyError(
            safe_format(
                "Flash verification failed: contents differ from {file} at offset 0x{offset:08X}",
                file=binary,
                offset=offset,
            )
        )

    stages.status(True)
    stages.success("Flash verification: PASSED")
    return CommandResult(size_bytes=len(expected))


COMMAND_HANDLERS: Dict[str, Callable[[CommandContext], CommandResult]] = {
    "info": run_info,
    "flash": run_flash,
    "dump": run_dump,
    "verify": run_verify,
}


def run_command(ctx: CommandContext) -> CommandResult:
    return COMMAND_HANDLERS[ctx.config.command](ctx)
