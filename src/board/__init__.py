"""Board profiles: discovery, validation and device naming."""

from .device_id import derive_device_id, get_fpga_family
from .profile import BoardProfile
from .registry import BoardRegistry, check_board_profile, validate_board_profile

__all__ = [
    "BoardProfile",
    "BoardRegistry",
    "check_board_profile",
    "derive_device_id",
    "get_fpga_family",
    "validate_board_profile",
]
