#!/usr/bin/env python3
"""
Exception hierarchy for vivado-fpga-tool.

Every fatal error carries a machine-readable ``code`` and the process
``exit_status`` the CLI returns for it, so scripted callers can tell the
failure kinds apart without parsing messages.
"""

from typing import Iterable, List, Optional

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_FPGA_CONNECT_FAILED = 2
EXIT_FLASH_NOT_DETECTED = 3
EXIT_FLASH_ERASE_FAILED = 4
EXIT_FLASH_WRITE_FAILED = 5
EXIT_FLASH_VERIFY_FAILED = 6
EXIT_VIVADO_ERROR = 7
EXIT_FILE_IO_ERROR = 8
EXIT_PLATFORM_ERROR = 9
EXIT_TIMEOUT = 10
EXIT_LOCK_EXISTS = 11


class VivadoToolError(Exception):
    """Base class for all fatal tool errors."""

    code = "tool_error"
    exit_status = EXIT_VIVADO_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentsError(VivadoToolError):
    """Raised for invalid command-line usage."""

    code = "invalid_arguments"
    exit_status = EXIT_INVALID_ARGS


class ConfigNotFoundError(VivadoToolError):
    """Raised when no board configuration file exists in any search path."""

    code = "config_not_found"
    exit_status = EXIT_INVALID_ARGS

    def __init__(self, board_name: str, searched: Iterable[str]):
        self.board_name = board_name
        self.searched: List[str] = [str(p) for p in searched]
        lines = "\n".join(f"  {p}" for p in self.searched)
        super().__init__(
            f"Board configuration not found: {board_name}.conf\n\n"
            f"Searched in:\n{lines}"
        )


class InvalidConfigError(VivadoToolError):
    """Raised once with every problem found in a board configuration."""

    code = "invalid_config"
    exit_status = EXIT_INVALID_ARGS

    def __init__(self, errors: Iterable[str], source: Optional[str] = None):
        self.errors: List[str] = list(errors)
        self.source = source
        header = "Invalid board configuration"
        if source:
            header += f" ({source})"
        body = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"{header}:\n{body}")


class UnparsablePartNameError(VivadoToolError):
    """Raised when no device-id pattern matches the FPGA part number."""

    code = "unparsable_part_name"
    exit_status = EXIT_INVALID_ARGS

    def __init__(self, fpga_part: str):
        self.fpga_part = fpga_part
        super().__init__(
            f"Cannot parse FPGA part name: {fpga_part} "
            "(use explicit FPGA_DEVICE in board config)"
        )


class PlatformError(VivadoToolError):
    """Raised when the host platform is unsupported or misconfigured."""

    code = "platform_error"
    exit_status = EXIT_PLATFORM_ERROR


class UsbAttachedError(PlatformError):
    """A JTAG cable is attached to WSL2 and hidden from Windows Vivado."""

    code = "usb_attached"


class TemplateNotFoundError(VivadoToolError):
    code = "template_not_found"
    exit_status = EXIT_VIVADO_ERROR


class TemplateRenderError(VivadoToolError):
    """Raised when a rendered script still contains placeholders."""

    code = "template_render_error"
    exit_status = EXIT_VIVADO_ERROR


class ToolNotFoundError(VivadoToolError):
    code = "tool_not_found"
    exit_status = EXIT_VIVADO_ERROR


class ToolExecutableNotFoundError(VivadoToolError):
    code = "tool_executable_not_found"
    exit_status = EXIT_VIVADO_ERROR

    def __init__(self, bin_dir: str, candidates: Iterable[str]):
        self.bin_dir = bin_dir
        self.candidates: List[str] = list(candidates)
        super().__init__(
            f"Vivado executable not found in: {bin_dir}\n\n"
            f"Looked for: {', '.join(self.candidates)}"
        )


class ScriptNotFoundError(VivadoToolError):
    code = "script_not_found"
    exit_status = EXIT_VIVADO_ERROR


class ToolInvocationError(VivadoToolError):
    """Generic Vivado failure with no more specific log evidence."""

    code = "tool_invocation_failed"
    exit_status = EXIT_VIVADO_ERROR


class FpgaConnectError(VivadoToolError):
    code = "fpga_connect_failed"
    exit_status = EXIT_FPGA_CONNECT_FAILED


class FlashNotDetectedError(VivadoToolError):
    code = "flash_not_detected"
    exit_status = EXIT_FLASH_NOT_DETECTED


class FlashEraseError(VivadoToolError):
    code = "flash_erase_failed"
    exit_status = EXIT_FLASH_ERASE_FAILED


class FlashProgramError(VivadoToolError):
    code = "flash_write_failed"
    exit_status = EXIT_FLASH_WRITE_FAILED


class FlashVerifyError(VivadoToolError):
    code = "flash_verify_failed"
    exit_status = EXIT_FLASH_VERIFY_FAILED


class FileIOError(VivadoToolError):
    code = "file_io_error"
    exit_status = EXIT_FILE_IO_ERROR
