#!/usr/bin/env python3
"""Vivado location, batch execution and output interpretation."""

from .result_extractor import (
    FLASH_FAILURE_MARKERS,
    READBACK_FAILURE_MARKERS,
    DetectedInfo,
    FailureKind,
    ProgressParser,
    classify,
    extract_detected_info,
    failure_to_error,
)
from .vivado_locator import ToolInstallation, VivadoLocator
from .vivado_runner import ExecutionResult, VivadoRunner

__all__ = [
    "DetectedInfo",
    "ExecutionResult",
    "FLASH_FAILURE_MARKERS",
    "FailureKind",
    "ProgressParser",
    "READBACK_FAILURE_MARKERS",
    "ToolInstallation",
    "VivadoLocator",
    "VivadoRunner",
    "classify",
    "extract_detected_info",
    "failure_to_error",
]
