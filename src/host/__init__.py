"""Host platform detection, path translation and process wrapping."""

from .detector import PlatformContext, detect_platform, platform_from_name, resolve_platform
from .paths import PathTranslation, to_native, to_posix, to_tcl_path
from .strategies import PathMode, PlatformKind, PlatformStrategy

__all__ = [
    "PathMode",
    "PathTranslation",
    "PlatformContext",
    "PlatformKind",
    "PlatformStrategy",
    "detect_platform",
    "platform_from_name",
    "resolve_platform",
    "to_native",
    "to_posix",
    "to_tcl_path",
]
