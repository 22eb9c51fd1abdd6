#!/usr/bin/env python3
"""
Path translation between the WSL (POSIX) and Windows views of a file.

Windows Vivado reached from WSL2 only understands ``C:\\...`` paths while
everything on the Linux side uses ``/mnt/c/...``. Translation is
best-effort: when neither the drive-letter rule nor ``wslpath`` can
convert a path, the original is returned with ``verified=False`` and a
warning is logged instead of failing the command.
"""

import re
import shutil
import subprocess
from typing import NamedTuple

from ..log_config import get_logger
from ..string_utils import log_debug_safe, log_warning_safe

logger = get_logger(__name__)

WINDOWS_PATH_RE = re.compile(r"^([A-Za-z]):\\(?!\\)(.*)$", re.DOTALL)
WINDOWS_PREFIX_RE = re.compile(r"^[A-Za-z]:\\")
WSL_MOUNT_RE = re.compile(r"^/mnt/([a-z])/(.*)$", re.DOTALL)


class PathTranslation(NamedTuple):
    """A translated path and whether the translation is known to be correct."""

    path: str
    verified: bool = True


def is_windows_path(path: str) -> bool:
    return bool(WINDOWS_PREFIX_RE.match(path))


def _wslpath(flag: str, path: str) -> str:
    """Run ``wslpath <flag> <path>``; return "" when unavailable or failing."""
    if shutil.which("wslpath") is None:
        return ""
    try:
        res = subprocess.run(
            ["wslpath", flag, path],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=5,
            check=False,
        )
    except (subprocess.SubprocessError, OSError) as e:
        log_debug_safe(logger, "wslpath failed: {err}", prefix="PATH", err=str(e))
        return ""
    if res.returncode != 0:
        return ""
    return res.stdout.strip()


def to_native(path: str) -> PathTranslation:
    """Convert a WSL path to its Windows form.

    ``/mnt/c/Temp/out.bin`` becomes ``C:\\Temp\\out.bin``. A path that is
    already in Windows form is returned unchanged.
    """
    if is_windows_path(path):
        return PathTranslation(path)

    match = WSL_MOUNT_RE.match(path)
    if match:
        drive, rest = match.groups()
        return PathTranslation(f"{drive.upper()}:\\" + rest.replace("/", "\\"))

    converted = _wslpath("-w", path)
    if converted:
        return PathTranslation(converted)

    log_warning_safe(
        logger,
        "Cannot convert WSL path to Windows: {path}",
        prefix="PATH",
        path=path,
    )
    return PathTranslation(path, verified=False)


def to_posix(path: str) -> PathTranslation:
    """Convert a Windows path to its WSL form.

    ``C:\\Temp\\out.bin`` becomes ``/mnt/c/Temp/out.bin``. Anything not
    shaped like ``<drive>:\\<rest>`` is already POSIX and passes through.
    """
    if not is_windows_path(path):
        return PathTranslation(path)

    match = WINDOWS_PATH_RE.match(path)
    if match:
        drive, rest = match.groups()
        return PathTranslation(f"/mnt/{drive.lower()}/" + rest.replace("\\", "/"))

    converted = _wslpath("-u", path)
    if converted:
        return PathTranslation(converted)

    log_warning_safe(
        logger,
        "Cannot convert Windows path to WSL: {path}",
        prefix="PATH",
        path=path,
    )
    return PathTranslation(path, verified=False)


def to_tcl_path(path: str) -> str:
    """Tcl accepts forward slashes on every OS; use them everywhere."""
    return path.replace("\\", "/")


def escape_for_cmd(path: str) -> str:
    """Double backslashes for embedding a path in a ``cmd.exe /c`` string."""
    return path.replace("\\", "\\\\")
