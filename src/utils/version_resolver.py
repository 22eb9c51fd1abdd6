#!/usr/bin/env python3
"""
Centralized version resolution for vivado-fpga-tool.

Single source of truth for the version printed by ``--version``.
"""

from importlib.metadata import PackageNotFoundError, version
from typing import Optional

from ..__version__ import __version__
from ..log_config import get_logger
from ..string_utils import log_debug_safe

logger = get_logger("version_resolver")

DISTRIBUTION_NAME = "vivado-fpga-tool"


def get_package_version() -> str:
    """
    Get the package version.

    Tries, in order:
    1. ``importlib.metadata`` for the installed distribution
    2. ``__version__.py`` when running from a source tree that is not installed
    """
    installed = _try_importlib_metadata()
    if installed:
        return installed

    log_debug_safe(
        logger,
        "Distribution metadata unavailable, using __version__.py: {version}",
        prefix="VERSION",
        version=__version__,
    )
    return __version__


def _try_importlib_metadata() -> Optional[str]:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError as e:
        log_debug_safe(
            logger, "Error with importlib.metadata: {error}", prefix="VERSION", error=e
        )
    return None
