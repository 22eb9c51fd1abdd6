#!/usr/bin/env python3
"""
Board configuration discovery, parsing and validation.

Board files are shell-style ``KEY=value`` assignments, one board per file::

    FPGA_PART="xc7s50csga324-1"
    FLASH_PART="is25lp128f"
    JTAG_DEVICE_INDEX=0
    DEFAULT_FLASH_SIZE=16M

Search order for ``<board>.conf``:
    1. ./boards/
    2. ~/.config/vivado-fpga-tool/boards/
    3. <depends dir>/boards/
"""

import dataclasses
import os
import re
import shlex
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..constants import BOARD_SUFFIX, BOARDS_DIRNAME, DEFAULT_PROFILE_NAME, USER_CONFIG_DIR
from ..exceptions import ConfigNotFoundError, InvalidConfigError
from ..log_config import get_logger
from ..string_utils import log_debug_safe, log_info_safe, log_warning_safe
from ..utils.validators import (
    RequiredValidator,
    ValidationResult,
    get_jtag_index_validator,
    get_size_validator,
)
from .profile import BoardProfile

logger = get_logger(__name__)

_ASSIGNMENT_RE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)$")

# Validators applied per field; every one runs so all problems surface at once
_FIELD_VALIDATORS = (
    ("FPGA_PART", "fpga_part", RequiredValidator("FPGA_PART")),
    ("FLASH_PART", "flash_part", RequiredValidator("FLASH_PART")),
    ("JTAG_DEVICE_INDEX", "jtag_device_index", get_jtag_index_validator()),
    ("DEFAULT_FLASH_SIZE", "default_flash_size", get_size_validator()),
)


def parse_config_text(text: str) -> Tuple[Dict[str, str], List[str]]:
    """Parse ``KEY=value`` lines.

    Returns:
        (values, errors) where errors describe lines that are not assignments
    """
    values: Dict[str, str] = {}
    errors: List[str] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        match = _ASSIGNMENT_RE.match(line)
        if not match:
            errors.append(f"line {lineno}: expected KEY=value, got: {line}")
            continue
        key, raw_value = match.groups()
        try:
            tokens = shlex.split(raw_value, comments=True)
        except ValueError as e:
            errors.append(f"line {lineno}: {key}: {e}")
            continue
        values[key] = " ".join(tokens)
    return values, errors


def _expand_path(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    return os.path.expanduser(os.path.expandvars(value))


def check_board_profile(profile: BoardProfile) -> ValidationResult:
    """Collect every problem with *profile* without raising."""
    result = ValidationResult()
    for _key, attr, validator in _FIELD_VALIDATORS:
        result.merge(validator.validate(getattr(profile, attr)))
    return result


def validate_board_profile(profile: BoardProfile) -> None:
    """Raise InvalidConfigError listing every invalid or missing field."""
    result = check_board_profile(profile)
    if not result.valid:
        source = str(profile.source) if profile.source else profile.name
        raise InvalidConfigError(result.errors, source=source)
    log_debug_safe(logger, "Board configuration validated successfully", prefix="BOARD")


def resolve_bscan_bitstream(profile: BoardProfile) -> BoardProfile:
    """Drop a BSCAN bitstream that does not exist so Vivado auto-generates one."""
    if not profile.bscan_bitstream:
        log_debug_safe(
            logger,
            "No BSCAN_BITSTREAM specified, will use Vivado auto-generation",
            prefix="BOARD",
        )
        return profile
    if Path(profile.bscan_bitstream).is_file():
        return profile
    log_warning_safe(
        logger,
        "BSCAN_BITSTREAM specified but file not found: {path}",
        prefix="BOARD",
        path=profile.bscan_bitstream,
    )
    log_warning_safe(logger, "Will use Vivado auto-generation instead", prefix="BOARD")
    return dataclasses.replace(profile, bscan_bitstream=None)


class BoardRegistry:
    """Locates and loads board profiles from the fixed search roots."""

    def __init__(
        self,
        depends_dir: Optional[Path] = None,
        cwd: Optional[Path] = None,
        config_dir: Path = USER_CONFIG_DIR,
    ):
        self.depends_dir = Path(depends_dir) if depends_dir else None
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.config_dir = Path(config_dir)

    def search_dirs(self) -> List[Path]:
        dirs = [self.cwd / BOARDS_DIRNAME, self.config_dir / BOARDS_DIRNAME]
        if self.depends_dir is not None:
            dirs.append(self.depends_dir / BOARDS_DIRNAME)
        return dirs

    def search_paths(self, board_name: str) -> List[Path]:
        return [d / f"{board_name}{BOARD_SUFFIX}" for d in self.search_dirs()]

    def _first_existing(self, name: str) -> Optional[Path]:
        log_debug_safe(
            logger, "Searching for board config: {name}{suffix}",
            prefix="BOARD", name=name, suffix=BOARD_SUFFIX,
        )
        for path in self.search_paths(name):
            log_debug_safe(logger, "  Checking: {path}", prefix="BOARD", path=str(path))
            if path.is_file():
                log_debug_safe(logger, "  Found: {path}", prefix="BOARD", path=str(path))
                return path
        return None

    def find(self, board_name: str) -> Path:
        """Return the first existing ``<board_name>.conf``.

        Raises:
            ConfigNotFoundError: Listing every searched path
        """
        path = self._first_existing(board_name)
        if path is None:
            available = self.list_boards()
            if available:
                log_info_safe(
                    logger,
                    "Available boards: {boards}",
                    prefix="BOARD",
                    boards=", ".join(available),
                )
            raise ConfigNotFoundError(board_name, self.search_paths(board_name))
        return path

    def _read(self, path: Path) -> Dict[str, str]:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise InvalidConfigError([f"cannot read file: {e}"], source=str(path)) from e
        values, errors = parse_config_text(text)
        if errors:
            raise InvalidConfigError(errors, source=str(path))
        return values

    def load(self, board_name: str) -> BoardProfile:
        """Find, parse and validate a board profile.

        Raises:
            ConfigNotFoundError: No file in any search location
            InvalidConfigError: Unparseable lines or invalid fields
        """
        path = self.find(board_name)
        log_info_safe(
            logger, "Loading board configuration: {board}", prefix="BOARD", board=board_name
        )
        log_debug_safe(logger, "Config file: {path}", prefix="BOARD", path=str(path))

        values = self._read(path)
        profile = BoardProfile.from_values(board_name, values, source=path)
        profile = dataclasses.replace(
            profile,
            bscan_bitstream=_expand_path(profile.bscan_bitstream),
            tool_path=_expand_path(profile.tool_path),
        )

        validate_board_profile(profile)
        profile = resolve_bscan_bitstream(profile)

        log_debug_safe(logger, "Board configuration loaded:", prefix="BOARD")
        log_debug_safe(logger, "  FPGA Part: {v}", prefix="BOARD", v=profile.fpga_part)
        log_debug_safe(logger, "  Flash Part: {v}", prefix="BOARD", v=profile.flash_part)
        log_debug_safe(
            logger, "  JTAG Index: {v}", prefix="BOARD", v=profile.jtag_device_index
        )
        log_debug_safe(
            logger, "  Flash Size: {v}", prefix="BOARD", v=profile.default_flash_size
        )
        if profile.description:
            log_debug_safe(
                logger, "  Description: {v}", prefix="BOARD", v=profile.description
            )
        if profile.tool_path:
            log_debug_safe(logger, "  Vivado Path: {v}", prefix="BOARD", v=profile.tool_path)
        return profile

    def load_default(self) -> Optional[str]:
        """Return ``VIVADO_PATH`` from the optional ``default.conf``, if any."""
        path = self._first_existing(DEFAULT_PROFILE_NAME)
        if path is None:
            log_debug_safe(logger, "No default.conf found (this is optional)", prefix="BOARD")
            return None

        log_info_safe(logger, "Loading default configuration", prefix="BOARD")
        log_debug_safe(logger, "Config file: {path}", prefix="BOARD", path=str(path))
        try:
            values = self._read(path)
        except InvalidConfigError as e:
            log_warning_safe(
                logger,
                "Failed to load default configuration: {err}",
                prefix="BOARD",
                err=e.message,
            )
            return None

        tool_path = _expand_path(values.get("VIVADO_PATH")) or None
        if tool_path:
            log_debug_safe(logger, "Default Vivado path: {path}", prefix="BOARD", path=tool_path)
        return tool_path

    def list_boards(self) -> List[str]:
        """Names of every board visible from the search roots."""
        names = set()
        for directory in self.search_dirs():
            if directory.is_dir():
                names.update(
                    p.stem
                    for p in directory.glob(f"*{BOARD_SUFFIX}")
                    if p.stem != DEFAULT_PROFILE_NAME
                )
        return sorted(names)
