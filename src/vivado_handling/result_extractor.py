#!/usr/bin/env python3
"""
Interpretation of captured Vivado output.

Vivado reports hardware-manager failures only as free text, so failures
are classified by scanning the output for fixed markers. Marker lists are
ordered; the first kind with any matching line wins, regardless of where
in the output the line appears.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Pattern, Tuple, Type

from ..exceptions import (
    FileIOError,
    FlashEraseError,
    FlashNotDetectedError,
    FlashProgramError,
    FlashVerifyError,
    ToolInvocationError,
    VivadoToolError,
)
from ..string_utils import log_debug_safe, safe_format

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    ERASE = "erase"
    PROGRAM = "program"
    VERIFY = "verify"
    NOT_DETECTED = "not_detected"
    FILE_IO = "file_io"
    GENERIC = "generic"


MarkerList = Tuple[Tuple[FailureKind, Pattern[str]], ...]


def _marker(pattern: str) -> Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


FLASH_FAILURE_MARKERS: MarkerList = (
    (FailureKind.ERASE, _marker(r"erase.*fail")),
    (FailureKind.PROGRAM, _marker(r"program.*fail|write.*fail")),
    (FailureKind.VERIFY, _marker(r"verify.*fail")),
    (FailureKind.NOT_DETECTED, _marker(r"not detected|not found")),
)

READBACK_FAILURE_MARKERS: MarkerList = (
    (FailureKind.NOT_DETECTED, _marker(r"not detected|not found")),
    (FailureKind.FILE_IO, _marker(r"file.*error|cannot.*write")),
)

# kind -> (exception class, user-facing message)
FAILURE_ERRORS: Dict[FailureKind, Tuple[Type[VivadoToolError], str]] = {
    FailureKind.ERASE: (FlashEraseError, "Flash erase failed"),
    FailureKind.PROGRAM: (FlashProgramError, "Flash programming failed"),
    FailureKind.VERIFY: (FlashVerifyError, "Flash verification failed"),
    FailureKind.NOT_DETECTED: (
        FlashNotDetectedError,
        "Flash not detected - check board connections and configuration",
    ),
    FailureKind.FILE_IO: (FileIOError, "File I/O error during readback"),
    FailureKind.GENERIC: (ToolInvocationError, "Vivado execution failed"),
}


def classify(log_text: str, markers: MarkerList = FLASH_FAILURE_MARKERS) -> FailureKind:
    """
    Classify a failed run from its output.

    Only meaningful when Vivado exited non-zero. Matching is per line and
    case-insensitive.

    >>> classify("ERROR: Erase Operation failed")
    <FailureKind.ERASE: 'erase'>
    """
    for kind, pattern in markers:
        if pattern.search(log_text):
            log_debug_safe(
                logger,
                "Failure classified as {kind} (marker: {pattern})",
                prefix="RESULT",
                kind=kind.value,
                pattern=pattern.pattern,
            )
            return kind
    return FailureKind.GENERIC


def failure_to_error(
    kind: FailureKind,
    detail: Optional[str] = None,
    log_file: Optional[str] = None,
) -> VivadoToolError:
    """Build the exception that reports *kind* to the user."""
    error_cls, message = FAILURE_ERRORS[kind]
    if detail:
        message = f"{message}: {detail}"
    if log_file:
        message = safe_format(
            "{message}\nCheck log file for details: {log_file}",
            message=message,
            log_file=log_file,
        )
    return error_cls(message)


_PART_NAME_RE = re.compile(r"Part Name:\s+(\S+)")
_FLASH_PART_RE = re.compile(r"Flash Part:\s+(.+)$", re.MULTILINE)
_DEVICE_COUNT_RE = re.compile(r"Found (\d+)(?= device)")


@dataclass
class DetectedInfo:
    """Hardware identifiers reported by an info script. Every field is optional."""

    fpga_part: Optional[str] = None
    flash_part: Optional[str] = None
    device_count: Optional[int] = None
    fpga_parts: List[str] = field(default_factory=list)


def extract_detected_info(log_text: str) -> DetectedInfo:
    """Pull the first labelled value of each kind out of *log_text*."""
    info = DetectedInfo()
    info.fpga_parts = _PART_NAME_RE.findall(log_text)
    if info.fpga_parts:
        info.fpga_part = info.fpga_parts[0]

    match = _FLASH_PART_RE.search(log_text)
    if match:
        info.flash_part = match.group(1).strip()

    match = _DEVICE_COUNT_RE.search(log_text)
    if match:
        info.device_count = int(match.group(1))
    return info


PROGRESS_MARKERS: Tuple[Tuple[Pattern[str], int], ...] = (
    (re.compile(r"Performing Erase Operation"), 0),
    (re.compile(r"Erase Operation successful"), 100),
    (re.compile(r"Performing Program Operation"), 0),
    (re.compile(r"Program Operation successful"), 100),
    (re.compile(r"Performing Program and Verify Operations"), 0),
    (re.compile(r"Program/Verify Operation successful"), 100),
    (re.compile(r"Performing Readback Operation"), 0),
    (re.compile(r"Readback Operation successful"), 100),
)

_MFG_ID_RE = re.compile(r"Mfg ID\s*:\s*([0-9a-fA-F]+)")


def parse_progress(line: str) -> Optional[int]:
    """Percent complete announced by *line*, or None."""
    for pattern, percent in PROGRESS_MARKERS:
        if pattern.search(line):
            return percent
    return None


def parse_mfg_id(line: str) -> Optional[str]:
    match = _MFG_ID_RE.search(line)
    return match.group(1) if match else None


class ProgressParser:
    """Line handler turning streamed Vivado output into progress callbacks."""

    def __init__(self, on_progress: Callable[[int], None]):
        self.on_progress = on_progress

    def __call__(self, line: str) -> None:
        percent = parse_progress(line)
        if percent is not None:
            self.on_progress(percent)

        mfg_id = parse_mfg_id(line)
        if mfg_id:
            log_debug_safe(
                logger,
                "Flash detected - Mfg ID: 0x{mfg_id}",
                prefix="RESULT",
                mfg_id=mfg_id,
            )
