#!/usr/bin/env python3
"""
Host platform detection.

Detection order:
    1. WSL interop marker under binfmt_misc      -> wsl2
    2. Linux kernel whose /proc/version mentions microsoft + wsl -> wsl2
    3. Any other Linux kernel                    -> linux
    4. MINGW / MSYS / CYGWIN / Windows           -> windows
"""

import platform
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ..exceptions import PlatformError
from ..log_config import get_logger
from ..string_utils import log_debug_safe, safe_format
from .strategies import PathMode, PlatformKind, PlatformStrategy, strategy_for

logger = get_logger(__name__)

WSL_INTEROP_MARKER = Path("/proc/sys/fs/binfmt_misc/WSLInterop")
PROC_VERSION = Path("/proc/version")

_WSL_SIGNATURE = re.compile(r"microsoft.*wsl", re.IGNORECASE)
_WINDOWS_SHELL = re.compile(r"^(MINGW|MSYS|CYGWIN)")


def _read_proc_version(proc_version: Path) -> str:
    try:
        return proc_version.read_text(errors="ignore")
    except OSError:
        return ""


def detect_platform(
    system: Optional[str] = None,
    interop_marker: Path = WSL_INTEROP_MARKER,
    proc_version: Path = PROC_VERSION,
) -> PlatformKind:
    """Classify the running host.

    Raises:
        PlatformError: If the host is none of the supported kinds
    """
    system = system if system is not None else platform.system()

    if interop_marker.is_file():
        log_debug_safe(logger, "Platform detected: WSL2 (via WSLInterop)", prefix="PLATFORM")
        return PlatformKind.WSL2

    if system == "Linux" and _WSL_SIGNATURE.search(_read_proc_version(proc_version)):
        log_debug_safe(logger, "Platform detected: WSL2 (via /proc/version)", prefix="PLATFORM")
        return PlatformKind.WSL2

    if system == "Linux":
        log_debug_safe(logger, "Platform detected: Native Linux", prefix="PLATFORM")
        return PlatformKind.LINUX

    if _WINDOWS_SHELL.match(system.upper()) or system == "Windows":
        log_debug_safe(logger, "Platform detected: Windows", prefix="PLATFORM")
        return PlatformKind.WINDOWS

    raise PlatformError(safe_format("Unsupported platform: {system}", system=system))


def platform_from_name(name: str) -> PlatformKind:
    """Validate a caller-supplied platform name.

    Raises:
        PlatformError: If *name* is not wsl2, linux or windows
    """
    try:
        return PlatformKind(name.strip().lower())
    except ValueError:
        valid = ", ".join(k.value for k in PlatformKind)
        raise PlatformError(
            safe_format(
                "Invalid platform: {name} (valid: {valid})", name=name, valid=valid
            )
        ) from None


@dataclass(frozen=True)
class PlatformContext:
    """The execution environment for one invocation."""

    kind: PlatformKind
    overridden: bool = False
    strategy: PlatformStrategy = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.strategy is None:
            object.__setattr__(self, "strategy", strategy_for(self.kind))

    @property
    def executable_name(self) -> str:
        return self.strategy.executable_name

    @property
    def path_mode(self) -> PathMode:
        return self.strategy.path_mode

    @property
    def is_wsl(self) -> bool:
        return self.kind is PlatformKind.WSL2


def resolve_platform(
    override: Optional[Union[str, PlatformKind]] = None, **detect_kwargs
) -> PlatformContext:
    """Use *override* when given, otherwise auto-detect. Never both."""
    if override:
        kind = override if isinstance(override, PlatformKind) else platform_from_name(override)
        log_debug_safe(logger, "Platform overridden: {kind}", prefix="PLATFORM", kind=kind.value)
        return PlatformContext(kind=kind, overridden=True)
    return PlatformContext(kind=detect_platform(**detect_kwargs))
