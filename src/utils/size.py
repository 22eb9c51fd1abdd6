"""Flash size strings such as ``16M`` or ``128K``."""

from ..exceptions import InvalidArgumentsError
from ..string_utils import safe_format
from .validators import SIZE_RE

SIZE_UNITS = {"": 1, "K": 1024, "M": 1024 ** 2, "G": 1024 ** 3}


def parse_size(size: str) -> int:
    """
    Convert a size string to bytes using binary units.

    >>> parse_size("16M")
    16777216
    >>> parse_size("4096")
    4096

    Raises:
        InvalidArgumentsError: If *size* is not ``<digits>[K|M|G]``
    """
    text = str(size).strip()
    if not SIZE_RE.fullmatch(text):
        raise InvalidArgumentsError(
            safe_format(
                "Invalid size: {size} (expected format: 16M, 128K, etc.)", size=size
            )
        )
    unit = text[-1] if text[-1] in "KMG" else ""
    digits = text[:-1] if unit else text
    return int(digits) * SIZE_UNITS[unit]
