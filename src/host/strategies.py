#!/usr/bin/env python3
"""
Per-platform behaviour for driving Vivado.

One strategy exists per supported host; the rest of the tool never checks
the platform kind directly and asks the strategy instead.
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Type, Union

from ..constants import WSL_TEMP_ROOT
from .paths import (
    PathTranslation,
    escape_for_cmd,
    is_windows_path,
    to_native,
    to_posix,
    to_tcl_path,
)


class PlatformKind(str, Enum):
    LINUX = "linux"
    WSL2 = "wsl2"
    WINDOWS = "windows"


class PathMode(str, Enum):
    IDENTITY = "identity"
    POSIX_WINDOWS = "posix<->windows"


class Invocation(NamedTuple):
    """Concrete argv and working directory for a subprocess call."""

    argv: List[str]
    cwd: Path


class PlatformStrategy(ABC):
    """Path translation, executable naming and process wrapping for a host."""

    kind: PlatformKind
    path_mode: PathMode = PathMode.IDENTITY
    #: Name reported as "the" Vivado executable for this platform
    executable_name: str = "vivado"
    #: Names tried, in order, inside ``<install>/bin``
    executable_candidates: Tuple[str, ...] = ("vivado",)
    #: Whether an executable that cannot be seen locally is still usable
    requires_local_executable: bool = True
    #: Whether JTAG cables must be checked for WSL USB passthrough
    requires_usb_check: bool = False

    def to_native(self, path: str) -> PathTranslation:
        return PathTranslation(path)

    def to_posix(self, path: str) -> PathTranslation:
        return PathTranslation(path)

    def translate_path(self, path: Union[str, Path]) -> str:
        """Return *path* as Vivado must see it."""
        return self.to_native(str(path)).path

    def tcl_path(self, path: Union[str, Path]) -> str:
        """Return *path* as it must appear inside a Tcl script."""
        return to_tcl_path(self.translate_path(path))

    def local_path(self, path: Union[str, Path]) -> Path:
        """Return *path* in the form this process can open."""
        return Path(self.to_posix(str(path)).path)

    def scratch_root(self) -> Optional[Path]:
        """Directory under which scratch dirs are created (None: system temp)."""
        return None

    @abstractmethod
    def wrap_invocation(
        self, executable: str, args: Sequence[str], working_dir: Path
    ) -> Invocation:
        """Build the argv that runs *executable* with *args* in *working_dir*."""


class LinuxStrategy(PlatformStrategy):
    kind = PlatformKind.LINUX
    executable_name = "vivado"
    executable_candidates = ("vivado_lab", "vivado", "vivado.bat")

    def wrap_invocation(self, executable, args, working_dir):
        return Invocation([executable, *args], Path(working_dir))


class WindowsStrategy(PlatformStrategy):
    """Git Bash, MSYS2, Cygwin or a native Windows interpreter."""

    kind = PlatformKind.WINDOWS
    executable_name = "vivado.bat"
    executable_candidates = ("vivado_lab.bat", "vivado.bat", "vivado_lab", "vivado")

    def wrap_invocation(self, executable, args, working_dir):
        return Invocation([executable, *args], Path(working_dir))


class Wsl2Strategy(PlatformStrategy):
    """Linux on a Windows kernel driving the Windows build of Vivado."""

    kind = PlatformKind.WSL2
    path_mode = PathMode.POSIX_WINDOWS
    executable_name = "vivado.bat"
    executable_candidates = ("vivado_lab.bat", "vivado.bat")
    requires_local_executable = False
    requires_usb_check = True

    def to_native(self, path: str) -> PathTranslation:
        return to_native(path)

    def to_posix(self, path: str) -> PathTranslation:
        return to_posix(path)

    def local_path(self, path: Union[str, Path]) -> Path:
        text = str(path)
        if is_windows_path(text):
            return Path(to_posix(text).path)
        return Path(text)

    def scratch_root(self) -> Optional[Path]:
        # Keep scripts on the Windows filesystem so cmd.exe never sees a
        # \\wsl$ UNC working directory.
        return WSL_TEMP_ROOT

    def wrap_invocation(self, executable, args, working_dir):
        win_dir = escape_for_cmd(self.translate_path(working_dir))
        win_exe = escape_for_cmd(self.translate_path(executable))
        # Quoted so an install under "Program Files" stays one token
        command = f"cd /d {win_dir} && \"{win_exe}\" {' '.join(args)}"
        return Invocation(["cmd.exe", "/c", command], Path(working_dir))


STRATEGIES: Dict[PlatformKind, Type[PlatformStrategy]] = {
    PlatformKind.LINUX: LinuxStrategy,
    PlatformKind.WSL2: Wsl2Strategy,
    PlatformKind.WINDOWS: WindowsStrategy,
}


def strategy_for(kind: PlatformKind) -> PlatformStrategy:
    return STRATEGIES[kind]()
