#!/usr/bin/env python3
"""
JTAG cable passthrough check for WSL2.

A Xilinx/Digilent cable attached to WSL2 through usbipd is invisible to the
Windows hw_server, so Vivado would report no targets. Catch that up front.
"""

import shutil
import subprocess
from typing import Callable, Iterable, Optional

from ..constants import JTAG_USB_IDS
from ..exceptions import UsbAttachedError
from ..log_config import get_logger
from ..string_utils import log_debug_safe, log_warning_safe
from .detector import PlatformContext

logger = get_logger(__name__)


def _list_usb_devices() -> str:
    if shutil.which("lsusb") is None:
        log_debug_safe(logger, "lsusb not available, skipping USB check", prefix="USB")
        return ""
    try:
        res = subprocess.run(
            ["lsusb"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=10,
            check=False,
        )
    except (subprocess.SubprocessError, OSError):
        return ""
    return res.stdout or ""


def find_attached_jtag(
    lsusb_output: str, usb_ids: Iterable[str] = JTAG_USB_IDS
) -> Optional[str]:
    """Return the first known JTAG USB id present in *lsusb_output*."""
    for usb_id in usb_ids:
        if usb_id in lsusb_output:
            return usb_id
    return None


def check_usb_attachment(
    context: PlatformContext,
    list_devices: Callable[[], str] = _list_usb_devices,
) -> None:
    """Raise UsbAttachedError when a JTAG cable is attached to WSL2."""
    if not context.strategy.requires_usb_check:
        return

    usb_id = find_attached_jtag(list_devices())
    if usb_id is None:
        log_debug_safe(logger, "No USB JTAG devices attached to WSL2 (good)", prefix="USB")
        return

    log_warning_safe(
        logger, "USB JTAG device ({usb_id}) detected in WSL2!", prefix="USB", usb_id=usb_id
    )
    log_warning_safe(
        logger, "This will prevent Windows Vivado from accessing the device.", prefix="USB"
    )
    log_warning_safe(logger, "To fix this, detach the USB device from WSL2:", prefix="USB")
    log_warning_safe(logger, "  usbipd detach --busid <BUSID>", prefix="USB")
    log_warning_safe(logger, "To list attached devices: usbipd list", prefix="USB")
    raise UsbAttachedError("USB JTAG device attached to WSL2. Please detach it first.")
