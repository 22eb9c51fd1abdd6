#!/usr/bin/env python3
"""Board profile data model."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

# Config-file key -> BoardProfile attribute
FIELD_KEYS: Dict[str, str] = {
    "FPGA_PART": "fpga_part",
    "FPGA_DEVICE": "fpga_device",
    "FLASH_PART": "flash_part",
    "JTAG_DEVICE_INDEX": "jtag_device_index",
    "DEFAULT_FLASH_SIZE": "default_flash_size",
    "BSCAN_BITSTREAM": "bscan_bitstream",
    "BOARD_DESCRIPTION": "description",
    "VIVADO_PATH": "tool_path",
}

REQUIRED_KEYS = ("FPGA_PART", "FLASH_PART", "JTAG_DEVICE_INDEX", "DEFAULT_FLASH_SIZE")


@dataclass(frozen=True)
class BoardProfile:
    """One FPGA + SPI flash pairing, as read from ``boards/<name>.conf``.

    Values are kept exactly as written in the file; ``validate_board_profile``
    checks them and ``jtag_index`` gives the parsed integer afterwards.
    """

    name: str
    fpga_part: str = ""
    flash_part: str = ""
    jtag_device_index: str = ""
    default_flash_size: str = ""
    fpga_device: Optional[str] = None
    bscan_bitstream: Optional[str] = None
    description: Optional[str] = None
    tool_path: Optional[str] = None
    source: Optional[Path] = None

    @property
    def jtag_index(self) -> int:
        return int(self.jtag_device_index)

    @classmethod
    def from_values(
        cls, name: str, values: Dict[str, str], source: Optional[Path] = None
    ) -> "BoardProfile":
        """Build a profile from parsed ``KEY=value`` pairs; unknown keys are ignored."""
        kwargs = {}
        for key, attr in FIELD_KEYS.items():
            value = values.get(key)
            if value is None:
                continue
            if key in REQUIRED_KEYS:
                kwargs[attr] = value
            else:
                kwargs[attr] = value or None
        return cls(name=name, source=source, **kwargs)

    def template_values(self) -> Dict[str, str]:
        """Substitutions every board-specific script receives."""
        return {
            "FPGA_PART": self.fpga_part,
            "FLASH_PART": self.flash_part,
            "JTAG_DEVICE_INDEX": self.jtag_device_index,
            "DEFAULT_FLASH_SIZE": self.default_flash_size,
        }
