#!/usr/bin/env python3
"""Tests for board profile discovery, parsing and validation."""

import pytest

from vivadofpgatool.board.profile import BoardProfile
from vivadofpgatool.board.registry import (
    BoardRegistry,
    check_board_profile,
    parse_config_text,
)
from vivadofpgatool.exceptions import ConfigNotFoundError, InvalidConfigError


@pytest.fixture
def registry(tmp_path, depends_dir):
    cwd = tmp_path / "work"
    cwd.mkdir()
    return BoardRegistry(depends_dir=depends_dir, cwd=cwd, config_dir=tmp_path / "config")


class TestParseConfigText:
    def test_quotes_comments_and_export(self):
        values, errors = parse_config_text(
            "# board file\n"
            'FPGA_PART="xc7s50csga324-1"\n'
            "export FLASH_PART='is25lp128f'\n"
            "JTAG_DEVICE_INDEX=0  # first device\n"
            "\n"
            "DEFAULT_FLASH_SIZE=16M\n"
        )
        assert errors == []
        assert values == {
            "FPGA_PART": "xc7s50csga324-1",
            "FLASH_PART": "is25lp128f",
            "JTAG_DEVICE_INDEX": "0",
            "DEFAULT_FLASH_SIZE": "16M",
        }

    def test_reports_non_assignment_lines(self):
        values, errors = parse_config_text("FPGA_PART=xc7s50\nthis is not valid\n")
        assert values == {"FPGA_PART": "xc7s50"}
        assert errors == ["line 2: expected KEY=value, got: this is not valid"]

    def test_reports_unbalanced_quotes(self):
        _values, errors = parse_config_text('FLASH_PART="is25lp128f\n')
        assert len(errors) == 1
        assert errors[0].startswith("line 1: FLASH_PART:")


class TestLoad:
    def test_loads_profile(self, registry, write_board):
        path = write_board()
        profile = registry.load("xc7s50-is25lp128f")
        assert profile.name == "xc7s50-is25lp128f"
        assert profile.fpga_part == "xc7s50csga324-1"
        assert profile.flash_part == "is25lp128f"
        assert profile.jtag_index == 0
        assert profile.default_flash_size == "16M"
        assert profile.description.startswith("Spartan-7")
        assert profile.source == path

    def test_cwd_boards_win_over_depends_dir(self, registry, write_board, board_values):
        write_board()
        write_board(
            values={**board_values, "FLASH_PART": "mt25ql128"}, root=registry.cwd
        )
        assert registry.load("xc7s50-is25lp128f").flash_part == "mt25ql128"

    def test_user_config_dir_wins_over_depends_dir(self, registry, write_board, board_values):
        write_board()
        write_board(
            values={**board_values, "DEFAULT_FLASH_SIZE": "8M"},
            root=registry.config_dir,
        )
        assert registry.load("xc7s50-is25lp128f").default_flash_size == "8M"

    def test_missing_board_lists_every_search_path(self, registry):
        with pytest.raises(ConfigNotFoundError) as exc_info:
            registry.load("nope")
        err = exc_info.value
        assert err.exit_status == 1
        assert len(err.searched) == 3
        assert all(p.endswith("nope.conf") for p in err.searched)
        assert "Board configuration not found: nope.conf" in err.message

    def test_missing_board_logs_available_boards(self, registry, write_board, caplog):
        write_board()
        write_board("xcau15p-mt25qu256")
        write_board("default", text='VIVADO_PATH="/opt/Xilinx"\n')
        caplog.set_level("INFO")
        with pytest.raises(ConfigNotFoundError):
            registry.load("nope")
        assert "Available boards: xc7s50-is25lp128f, xcau15p-mt25qu256" in caplog.text

    def test_list_boards_skips_default(self, registry, write_board):
        write_board()
        write_board("default", text="")
        assert registry.list_boards() == ["xc7s50-is25lp128f"]

    def test_invalid_board_reports_all_problems_at_once(self, registry, write_board):
        write_board(
            "broken",
            text='FPGA_PART="xc7s50csga324-1"\nJTAG_DEVICE_INDEX="abc"\nDEFAULT_FLASH_SIZE=16M\n',
        )
        with pytest.raises(InvalidConfigError) as exc_info:
            registry.load("broken")
        errors = exc_info.value.errors
        assert "FLASH_PART is not defined" in errors
        assert "Invalid JTAG_DEVICE_INDEX: abc (must be a number)" in errors
        assert len(errors) == 2
        assert "FLASH_PART is not defined" in exc_info.value.message
        assert "JTAG_DEVICE_INDEX" in exc_info.value.message

    def test_unparseable_file_is_invalid(self, registry, write_board):
        write_board("garbled", text="FPGA_PART xc7s50\n")
        with pytest.raises(InvalidConfigError):
            registry.load("garbled")

    def test_missing_bscan_bitstream_is_dropped(self, registry, write_board, board_values, tmp_path):
        write_board(values={**board_values, "BSCAN_BITSTREAM": str(tmp_path / "none.bit")})
        assert registry.load("xc7s50-is25lp128f").bscan_bitstream is None

    def test_existing_bscan_bitstream_is_kept(self, registry, write_board, board_values, tmp_path):
        bit = tmp_path / "bscan.bit"
        bit.write_bytes(b"\x00")
        write_board(values={**board_values, "BSCAN_BITSTREAM": str(bit)})
        assert registry.load("xc7s50-is25lp128f").bscan_bitstream == str(bit)

    def test_tool_path_expands_environment(self, registry, write_board, board_values, monkeypatch):
        monkeypatch.setenv("XILINX_HOME", "/opt/Xilinx")
        write_board(values={**board_values, "VIVADO_PATH": "$XILINX_HOME/2025.1/Vivado"})
        assert registry.load("xc7s50-is25lp128f").tool_path == "/opt/Xilinx/2025.1/Vivado"


class TestLoadDefault:
    def test_absent_default_is_none(self, registry):
        assert registry.load_default() is None

    def test_default_vivado_path(self, registry, write_board):
        write_board("default", text='VIVADO_PATH="/mnt/c/Xilinx/2025.1/Vivado"\n')
        assert registry.load_default() == "/mnt/c/Xilinx/2025.1/Vivado"

    def test_unparseable_default_is_ignored(self, registry, write_board):
        write_board("default", text="not an assignment\n")
        assert registry.load_default() is None


def test_shipped_board_files_validate(tmp_path):
    from vivadofpgatool.constants import PACKAGE_DIR

    registry = BoardRegistry(
        depends_dir=PACKAGE_DIR, cwd=tmp_path, config_dir=tmp_path / "config"
    )
    for name in ("xc7s50-is25lp128f", "xcau15p-mt25qu256"):
        profile = registry.load(name)
        assert check_board_profile(profile).valid


def test_check_board_profile_collects_errors():
    result = check_board_profile(BoardProfile(name="empty"))
    assert not result.valid
    assert len(result.errors) == 4
