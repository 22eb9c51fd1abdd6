#!/usr/bin/env python3
"""Tests for the WSL2 JTAG cable passthrough check."""

import pytest

from vivadofpgatool.exceptions import PlatformError, UsbAttachedError
from vivadofpgatool.host.usb import check_usb_attachment, find_attached_jtag

LSUSB_WITH_DIGILENT = """\
Bus 001 Device 001: ID 1d6b:0002 Linux Foundation 2.0 root hub
Bus 001 Device 003: ID 0403:6014 Future Technology Devices International, Ltd FT232H
"""

LSUSB_CLEAN = "Bus 001 Device 001: ID 1d6b:0002 Linux Foundation 2.0 root hub\n"


def test_find_attached_jtag():
    assert find_attached_jtag(LSUSB_WITH_DIGILENT) == "0403:6014"
    assert find_attached_jtag("ID 03fd:0013 Xilinx, Inc.") == "03fd:0013"
    assert find_attached_jtag(LSUSB_CLEAN) is None


def test_attached_cable_fails_on_wsl(wsl_platform, caplog):
    with pytest.raises(UsbAttachedError) as exc_info:
        check_usb_attachment(wsl_platform, list_devices=lambda: LSUSB_WITH_DIGILENT)
    assert isinstance(exc_info.value, PlatformError)
    assert exc_info.value.exit_status == 9
    assert "usbipd detach --busid <BUSID>" in caplog.text


def test_clean_wsl_passes(wsl_platform):
    check_usb_attachment(wsl_platform, list_devices=lambda: LSUSB_CLEAN)


def test_missing_lsusb_output_is_not_an_error(wsl_platform):
    check_usb_attachment(wsl_platform, list_devices=lambda: "")


def test_other_platforms_skip_the_check(linux_platform):
    def fail():
        raise AssertionError("lsusb must not run on native Linux")

    check_usb_attachment(linux_platform, list_devices=fail)
