#!/usr/bin/env python3
"""Tests for the per-command scratch directory."""

import os

import pytest

from vivadofpgatool.exceptions import FileIOError
from vivadofpgatool.host.detector import PlatformContext
from vivadofpgatool.host.strategies import LinuxStrategy, PlatformKind
from vivadofpgatool.utils.scratch import scratch_directory, scratch_prefix


class RootedStrategy(LinuxStrategy):
    def __init__(self, root):
        self.root = root

    def scratch_root(self):
        return self.root


def test_prefix_contains_pid():
    assert scratch_prefix() == f"vivado-fpga-tool_{os.getpid()}_"


def test_removed_after_normal_exit(linux_platform):
    with scratch_directory(linux_platform) as path:
        assert path.is_dir()
        assert path.name.startswith(scratch_prefix())
        (path / "flash.tcl").write_text("puts hi\n")
    assert not path.exists()


def test_removed_after_error(linux_platform):
    with pytest.raises(RuntimeError):
        with scratch_directory(linux_platform) as path:
            raise RuntimeError("boom")
    assert not path.exists()


def test_created_under_strategy_root(tmp_path):
    root = tmp_path / "Temp"
    platform = PlatformContext(kind=PlatformKind.LINUX, strategy=RootedStrategy(root))
    with scratch_directory(platform) as path:
        assert path.parent == root
    assert root.is_dir()


def test_unusable_root(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    platform = PlatformContext(
        kind=PlatformKind.LINUX, strategy=RootedStrategy(blocker / "Temp")
    )
    with pytest.raises(FileIOError, match="Failed to create temporary directory"):
        with scratch_directory(platform):
            pass


def test_no_platform_uses_system_temp():
    with scratch_directory() as path:
        assert path.is_dir()
    assert not path.exists()
