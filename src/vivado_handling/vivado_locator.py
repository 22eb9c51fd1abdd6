#!/usr/bin/env python3
"""
Locate a Vivado (or Vivado Lab Edition) installation.

Priority order for the installation root:
    1. --vivado=<path> on the command line
    2. VIVADO_PATH from the board profile (or boards/default.conf)
    3. $VIVADO_ROOT
    4. Build-time default (constants.INSTALL_VIVADO_PATH)
    5. vivado_lab, then vivado, found on $PATH (root = bin/..)
"""

import logging
import os
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional, Tuple

from ..constants import ENV_VIVADO_ROOT, INSTALL_VIVADO_PATH
from ..exceptions import ToolExecutableNotFoundError, ToolNotFoundError
from ..host.detector import PlatformContext
from ..string_utils import log_debug_safe, log_info_safe, safe_format

logger = logging.getLogger(__name__)

# Look for version pattern like /tools/Xilinx/2025.1/Vivado
VERSION_RE = re.compile(r"[/\\](\d+\.\d+)(?:[/\\]|$)")

PATH_SEARCH_NAMES = ("vivado_lab", "vivado")

TOOL_NOT_FOUND_HELP = """Vivado installation not found.

Please specify Vivado path using one of these methods:
  1. Create boards/default.conf with VIVADO_PATH:
     cp boards/default.conf.example boards/default.conf
  2. Use --vivado=<path> flag:
     vivado-fpga-tool info --vivado=/mnt/c/Xilinx/2025.1/Vivado
  3. Set VIVADO_ROOT environment variable:
     export VIVADO_ROOT=/mnt/c/Xilinx/2025.1/Vivado
  4. Use --board=<name> to load Vivado path from board config

Both full Vivado and Vivado Lab Edition are supported."""


@dataclass(frozen=True)
class ToolInstallation:
    """A resolved Vivado installation.

    Paths are in the form this process can open; the platform strategy
    translates them when handing them to Vivado.
    """

    install_root: Path
    executable_path: Path
    version: str = "unknown"
    source: str = ""

    @property
    def bin_dir(self) -> Path:
        return self.install_root / "bin"


def extract_version_from_path(path: str) -> str:
    """Best-effort version from an install path; ``unknown`` if absent."""
    match = VERSION_RE.search(str(path))
    if match:
        return match.group(1)
    return "unknown"


class VivadoLocator:
    """Resolves and caches the Vivado installation for one command."""

    def __init__(
        self,
        platform: PlatformContext,
        cli_path: Optional[str] = None,
        board_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        install_default: str = INSTALL_VIVADO_PATH,
        which: Callable[[str], Optional[str]] = shutil.which,
        prefix: str = "VIVADO",
    ):
        self.platform = platform
        self.cli_path = cli_path
        self.board_path = board_path
        self.environ = os.environ if environ is None else environ
        self.install_default = install_default
        self.which = which
        self.prefix = prefix
        self._installation: Optional[ToolInstallation] = None

    def resolve_root(self) -> Tuple[str, str]:
        """
        Pick the installation root by priority.

        Returns:
            (root, source) where source names the winning rule

        Raises:
            ToolNotFoundError: If no rule yields a path
        """
        candidates = (
            ("CLI flag", self.cli_path),
            ("board config", self.board_path),
            (f"{ENV_VIVADO_ROOT} env var", self.environ.get(ENV_VIVADO_ROOT)),
            ("build configuration", self.install_default),
        )
        for source, value in candidates:
            if value:
                log_debug_safe(
                    logger,
                    "Vivado path from {source}: {path}",
                    prefix=self.prefix,
                    source=source,
                    path=value,
                )
                return value, source

        for name in PATH_SEARCH_NAMES:
            found = self.which(name)
            if found:
                root = str(Path(found).parent.parent)
                log_debug_safe(
                    logger,
                    "Vivado path auto-detected from PATH ({name}): {path}",
                    prefix=self.prefix,
                    name=name,
                    path=root,
                )
                return root, "PATH"

        raise ToolNotFoundError(TOOL_NOT_FOUND_HELP)

    def find_executable(self, install_root: Path) -> Path:
        """
        Return the first existing executable under ``<root>/bin``.

        Under WSL2 the Windows executable need not be visible from Linux;
        the platform's default name is used when none is found.

        Raises:
            ToolExecutableNotFoundError: Listing every name tried
        """
        strategy = self.platform.strategy
        bin_dir = install_root / "bin"
        for name in strategy.executable_candidates:
            candidate = bin_dir / name
            if candidate.is_file():
                log_debug_safe(
                    logger, "Detected Vivado executable: {name}", prefix=self.prefix, name=name
                )
                return candidate

        if not strategy.requires_local_executable:
            return bin_dir / strategy.executable_name

        raise ToolExecutableNotFoundError(str(bin_dir), strategy.executable_candidates)

    def locate(self) -> ToolInstallation:
        """
        Resolve the installation once and cache it.

        Raises:
            ToolNotFoundError: No candidate root, or the root is not a directory
            ToolExecutableNotFoundError: No known executable in ``bin``
        """
        if self._installation is not None:
            return self._installation

        root, source = self.resolve_root()
        install_root = self.platform.strategy.local_path(root)
        if not install_root.is_dir():
            raise ToolNotFoundError(
                safe_format("Vivado path does not exist: {path}", path=root)
            )

        executable = self.find_executable(install_root)
        version = extract_version_from_path(root)
        if version == "unknown":
            log_debug_safe(
                logger, "Could not detect Vivado version from path", prefix=self.prefix
            )

        self._installation = ToolInstallation(
            install_root=install_root,
            executable_path=executable,
            version=version,
            source=source,
        )
        log_info_safe(logger, "Vivado found: {path}", prefix=self.prefix, path=install_root)
        log_debug_safe(
            logger, "Vivado executable: {exe}", prefix=self.prefix, exe=executable
        )
        log_debug_safe(logger, "Vivado version: {v}", prefix=self.prefix, v=version)
        return self._installation

