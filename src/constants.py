#!/usr/bin/env python3
"""Shared constants for vivado-fpga-tool."""

from pathlib import Path

# Build-time defaults. Packagers may substitute these at install time; an
# empty string means "not configured".
INSTALL_SHARE_DIR = ""
INSTALL_VIVADO_PATH = ""

TOOL_NAME = "vivado-fpga-tool"

# Environment variables
ENV_VIVADO_ROOT = "VIVADO_ROOT"
ENV_TOOL_HOME = "VIVADO_FPGA_TOOL_HOME"
ENV_LOG_DIR = "LOG_DIR"

USER_CONFIG_DIR = Path.home() / ".config" / TOOL_NAME
BOARDS_DIRNAME = "boards"
BOARD_SUFFIX = ".conf"
DEFAULT_PROFILE_NAME = "default"

DEFAULT_LOG_DIR = Path("/tmp/vivado-logs")

# Package-relative locations
PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATE_DIR = PACKAGE_DIR / "templates" / "tcl"

# Windows-side scratch root as seen from WSL
WSL_TEMP_ROOT = Path("/mnt/c/Temp")

# Xilinx Platform Cable USB II, Digilent JTAG-HS3
JTAG_USB_IDS = ("03fd:0013", "0403:6014")

# Fixed batch-mode flags passed to Vivado ahead of the script name
VIVADO_BATCH_FLAGS = ("-mode", "batch", "-notrace", "-source")

TOTAL_STAGES = 5
