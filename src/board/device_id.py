#!/usr/bin/env python3
"""
Vivado hw_device names from Xilinx part numbers.

    7-series:    xc7s50csga324-1     -> xc7s50
                 xc7a35ticsg324-1L   -> xc7a35ti
    UltraScale+: xcau15p-ffvb676-2-e -> xcau15p
                 xcvu9p-flga2104-2-e -> xcvu9p

The base name is suffixed with ``_<jtag index>`` to form the device id.
Patterns are tried in the listed order and the first match wins; a part
matching both families resolves to the 7-series rule.
"""

import re
from typing import Pattern, Tuple

from ..exceptions import UnparsablePartNameError
from ..log_config import get_logger
from ..string_utils import log_debug_safe, log_warning_safe
from .profile import BoardProfile

logger = get_logger(__name__)

DEVICE_ID_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("7series", re.compile(r"^(xc[0-9]+[a-z][0-9]+)(ti)?")),
    ("ultrascale", re.compile(r"^(xc[a-z]+[0-9]+)(p)?")),
)

FAMILY_PREFIXES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("7series", ("xc7s", "xc7a", "xc7k", "xc7v")),
    ("ultrascale", ("xcau", "xcvu", "xcku")),
)


def base_part_name(fpga_part: str) -> str:
    """Return the package-less base part, e.g. ``xc7s50`` for ``xc7s50csga324-1``."""
    for family, pattern in DEVICE_ID_PATTERNS:
        match = pattern.match(fpga_part)
        if match:
            log_debug_safe(
                logger,
                "Part {part} matched {family} pattern",
                prefix="BOARD",
                part=fpga_part,
                family=family,
            )
            return match.group(1) + (match.group(2) or "")
    raise UnparsablePartNameError(fpga_part)


def derive_device_id(profile: BoardProfile) -> str:
    """Return the hw_device name Vivado uses for the board's FPGA.

    An explicit ``FPGA_DEVICE`` in the profile is returned unchanged.

    Raises:
        UnparsablePartNameError: If no pattern matches and no override is set
    """
    if profile.fpga_device:
        return profile.fpga_device
    return f"{base_part_name(profile.fpga_part)}_{profile.jtag_device_index}"


def get_fpga_family(fpga_part: str) -> str:
    for family, prefixes in FAMILY_PREFIXES:
        if fpga_part.startswith(prefixes):
            return family
    log_warning_safe(
        logger, "Unknown FPGA family for part: {part}", prefix="BOARD", part=fpga_part
    )
    return "unknown"
