"""Per-command scratch directory for rendered Tcl scripts."""

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from ..constants import TOOL_NAME
from ..exceptions import FileIOError
from ..host.detector import PlatformContext
from ..string_utils import log_debug_safe, log_warning_safe, safe_format

logger = logging.getLogger(__name__)


def scratch_prefix() -> str:
    return f"{TOOL_NAME}_{os.getpid()}_"


@contextmanager
def scratch_directory(
    platform: Optional[PlatformContext] = None,
) -> Generator[Path, None, None]:
    """
    Create a scratch directory owned by this invocation and remove it on exit.

    Under WSL2 the directory lives on the Windows filesystem so the
    Windows build of Vivado can open the scripts inside it.

    Raises:
        FileIOError: If the directory cannot be created
    """
    root = platform.strategy.scratch_root() if platform is not None else None
    try:
        if root is not None:
            root.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(prefix=scratch_prefix(), dir=root))
    except OSError as e:
        raise FileIOError(
            safe_format(
                "Failed to create temporary directory under {root}: {error}",
                root=root or tempfile.gettempdir(),
                error=e,
            )
        ) from e

    log_debug_safe(logger, "Created scratch directory: {path}", prefix="SCRATCH", path=path)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        if path.exists():
            log_warning_safe(
                logger,
                "Failed to remove scratch directory: {path}",
                prefix="SCRATCH",
                path=path,
            )
        else:
            log_debug_safe(
                logger, "Removed scratch directory: {path}", prefix="SCRATCH", path=path
            )
