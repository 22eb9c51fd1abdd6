#!/usr/bin/env python3
"""Tests for host platform detection."""

import pytest

from vivadofpgatool.exceptions import PlatformError
from vivadofpgatool.host.detector import (
    PlatformContext,
    detect_platform,
    platform_from_name,
    resolve_platform,
)
from vivadofpgatool.host.strategies import PlatformKind, Wsl2Strategy


@pytest.fixture
def proc_files(tmp_path):
    marker = tmp_path / "WSLInterop"
    version = tmp_path / "version"
    version.write_text("Linux version 6.1.0-generic (gcc) #1 SMP")
    return marker, version


class TestDetectPlatform:
    def test_interop_marker_means_wsl2(self, proc_files):
        marker, version = proc_files
        marker.write_text("enabled")
        assert detect_platform("Linux", marker, version) is PlatformKind.WSL2

    def test_proc_version_signature_means_wsl2(self, proc_files):
        marker, version = proc_files
        version.write_text("Linux version 5.15.90.1-microsoft-standard-WSL2")
        assert detect_platform("Linux", marker, version) is PlatformKind.WSL2

    def test_plain_linux(self, proc_files):
        marker, version = proc_files
        assert detect_platform("Linux", marker, version) is PlatformKind.LINUX

    def test_missing_proc_version_is_plain_linux(self, tmp_path):
        assert (
            detect_platform("Linux", tmp_path / "none", tmp_path / "missing")
            is PlatformKind.LINUX
        )

    @pytest.mark.parametrize(
        "system", ["MINGW64_NT-10.0-19045", "MSYS_NT-10.0", "CYGWIN_NT-10.0", "Windows"]
    )
    def test_windows_shells(self, proc_files, system):
        marker, version = proc_files
        assert detect_platform(system, marker, version) is PlatformKind.WINDOWS

    def test_unsupported_platform(self, proc_files):
        marker, version = proc_files
        with pytest.raises(PlatformError, match="Unsupported platform: Darwin"):
            detect_platform("Darwin", marker, version)


class TestPlatformFromName:
    @pytest.mark.parametrize(
        "name,kind",
        [
            ("wsl2", PlatformKind.WSL2),
            ("WSL2", PlatformKind.WSL2),
            ("linux", PlatformKind.LINUX),
            ("windows", PlatformKind.WINDOWS),
        ],
    )
    def test_valid_names(self, name, kind):
        assert platform_from_name(name) is kind

    def test_invalid_name(self):
        with pytest.raises(PlatformError) as exc_info:
            platform_from_name("macos")
        assert exc_info.value.exit_status == 9
        assert "Invalid platform: macos" in exc_info.value.message


class TestResolvePlatform:
    def test_override_skips_detection(self):
        context = resolve_platform("wsl2")
        assert context.kind is PlatformKind.WSL2
        assert context.overridden
        assert isinstance(context.strategy, Wsl2Strategy)

    def test_detection_when_no_override(self, proc_files):
        marker, version = proc_files
        context = resolve_platform(None, system="Linux", interop_marker=marker, proc_version=version)
        assert context.kind is PlatformKind.LINUX
        assert not context.overridden


def test_context_delegates_to_strategy():
    context = PlatformContext(kind=PlatformKind.WSL2)
    assert context.is_wsl
    assert context.executable_name == "vivado.bat"
    assert not PlatformContext(kind=PlatformKind.LINUX).is_wsl
