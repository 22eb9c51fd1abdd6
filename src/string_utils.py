#!/usr/bin/env python3
"""
Message formatting and logging helpers.

Every log line in the tool is built through these helpers so that a bad
or missing format key never turns into an exception in the middle of a
flash operation.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

TCL_BORDER = "#" + "=" * 78

TIMESTAMP_FORMAT = "%H:%M:%S"

_ACRONYMS = {"fpga": "FPGA", "jtag": "JTAG"}

# Fixed-width level column of the console line
LEVEL_LABELS: Dict[int, str] = {
    logging.DEBUG: " DEBUG ",
    logging.INFO: " INFO  ",
    logging.WARNING: "WARNING",
    logging.ERROR: "ERROR  ",
    logging.CRITICAL: "CRITCL ",
}

_LEVEL_METHODS: Dict[int, str] = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "critical",
}


class _Missing:
    """Stand-in for an absent key; renders the same whatever the format spec."""

    def __init__(self, key: str):
        self.key = key

    def __format__(self, spec: str) -> str:
        return f"<MISSING:{self.key}>"


class _TrackingDict(dict):
    def __init__(self, values: Dict[str, Any]):
        super().__init__(values)
        self.missing: List[str] = []

    def __missing__(self, key: str) -> _Missing:
        self.missing.append(key)
        return _Missing(key)


def safe_format(template: str, prefix: Optional[str] = None, **kwargs: Any) -> str:
    """
    Format *template* with *kwargs* without ever raising.

    Missing keys render as ``<MISSING:key>``; a malformed template is
    returned unformatted. *prefix* is prepended as ``[PREFIX] ``.

    >>> safe_format("Board {board} uses {part}", board="arty", part="xc7a35t")
    'Board arty uses xc7a35t'
    >>> safe_format("Loading {name}", prefix="BOARD", name="xc7s50")
    '[BOARD] Loading xc7s50'
    """
    values = _TrackingDict(kwargs)
    try:
        message = template.format_map(values)
    except (ValueError, IndexError, AttributeError) as e:
        logging.getLogger(__name__).error("Format error in string template: %s", e)
        message = template
    if values.missing:
        logging.getLogger(__name__).warning(
            "Missing key(s) in string template: %s", ", ".join(values.missing)
        )
    return f"[{prefix}] {message}" if prefix else message


def format_padded_message(message: str, level: int) -> str:
    """
    Prefix *message* with a short timestamp and a fixed-width level column.

    >>> format_padded_message("Vivado found", logging.INFO)  # doctest: +SKIP
    '  14:23:45 │  INFO  │ Vivado found'
    """
    label = LEVEL_LABELS.get(level, logging.getLevelName(level)[:7].ljust(7))
    stamp = datetime.now().strftime(TIMESTAMP_FORMAT)
    return f"  {stamp} │ {label}│ {message}"


def safe_log_format(
    logger: logging.Logger,
    level: int,
    template: str,
    prefix: Optional[str] = None,
    **kwargs: Any,
) -> None:
    """Format with :func:`safe_format` and log the padded result at *level*."""
    message = format_padded_message(safe_format(template, prefix=prefix, **kwargs), level)
    method = _LEVEL_METHODS.get(level)
    if method is None:
        logger.log(level, message)
    else:
        # Named method so tests can assert on logger.info and friends
        getattr(logger, method)(message)


def log_info_safe(
    logger: logging.Logger, template: str, prefix: Optional[str] = None, **kwargs: Any
) -> None:
    safe_log_format(logger, logging.INFO, template, prefix=prefix, **kwargs)


def log_error_safe(
    logger: logging.Logger, template: str, prefix: Optional[str] = None, **kwargs: Any
) -> None:
    safe_log_format(logger, logging.ERROR, template, prefix=prefix, **kwargs)


def log_warning_safe(
    logger: logging.Logger, template: str, prefix: Optional[str] = None, **kwargs: Any
) -> None:
    safe_log_format(logger, logging.WARNING, template, prefix=prefix, **kwargs)


def log_debug_safe(
    logger: logging.Logger, template: str, prefix: Optional[str] = None, **kwargs: Any
) -> None:
    safe_log_format(logger, logging.DEBUG, template, prefix=prefix, **kwargs)


def generate_tcl_header_comment(title: str, **fields: Optional[str]) -> str:
    """
    Banner comment for a generated Tcl script.

    One ``# Key: value`` line per non-empty field, keys title-cased from
    the keyword name (``fpga_part`` becomes ``FPGA Part``).
    """
    lines = [TCL_BORDER, f"# {title}"]
    for key, value in fields.items():
        if value is None or value == "":
            continue
        label = " ".join(_ACRONYMS.get(word, word.capitalize()) for word in key.split("_"))
        lines.append(f"# {label}: {value}")
    lines.append(TCL_BORDER)
    return "\n".join(lines)


def format_size_short(size_bytes: int) -> str:
    """``512B``, ``2.0KB``, ``16.0MB``, ``2.0GB`` (binary units)."""
    for unit, scale in (("GB", 1024 ** 3), ("MB", 1024 ** 2), ("KB", 1024)):
        if size_bytes >= scale:
            return f"{size_bytes / scale:.1f}{unit}"
    return f"{size_bytes}B"
