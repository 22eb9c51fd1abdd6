"""Shared fixtures: board directories, a fake Vivado tree and platforms."""

import logging
from pathlib import Path

import pytest

from vivadofpgatool.host.detector import PlatformContext
from vivadofpgatool.host.strategies import PlatformKind

XC7S50_BOARD = {
    "FPGA_PART": "xc7s50csga324-1",
    "FLASH_PART": "is25lp128f",
    "JTAG_DEVICE_INDEX": "0",
    "DEFAULT_FLASH_SIZE": "16M",
    "BOARD_DESCRIPTION": "Spartan-7 XC7S50 with ISSI IS25LP128F",
}


def format_board(values):
    return "".join(f'{key}="{value}"\n' for key, value in values.items())


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """setup_logging replaces root handlers; restore them after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def depends_dir(tmp_path):
    path = tmp_path / "depends"
    (path / "boards").mkdir(parents=True)
    return path


@pytest.fixture
def write_board(depends_dir):
    """Write ``<name>.conf`` into a boards directory (default: the depends dir)."""

    def _write(name="xc7s50-is25lp128f", values=None, root=None, text=None):
        boards = Path(root or depends_dir) / "boards"
        boards.mkdir(parents=True, exist_ok=True)
        path = boards / f"{name}.conf"
        path.write_text(text if text is not None else format_board(values or XC7S50_BOARD))
        return path

    return _write


@pytest.fixture
def fake_vivado(tmp_path):
    """A Vivado install tree with an executable stub in bin/."""
    root = tmp_path / "Xilinx" / "2025.1" / "Vivado"
    (root / "bin").mkdir(parents=True)
    exe = root / "bin" / "vivado"
    exe.write_text("#!/bin/sh\nexit 0\n")
    exe.chmod(0o755)
    return root


@pytest.fixture
def linux_platform():
    return PlatformContext(kind=PlatformKind.LINUX)


@pytest.fixture
def wsl_platform():
    return PlatformContext(kind=PlatformKind.WSL2)


@pytest.fixture
def board_values():
    """Fresh copy of a valid XC7S50 board profile."""
    return dict(XC7S50_BOARD)
