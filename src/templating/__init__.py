#!/usr/bin/env python3
"""
Templating for the Vivado automation scripts:
- ``{{KEY}}`` token substitution on Tcl templates
- Per-command Tcl script generation
"""

from .tcl_builder import TclScriptBuilder, TclScriptType
from .template_renderer import (
    TemplateRenderer,
    find_placeholders,
    substitute,
    write_script,
)

__all__ = [
    "TclScriptBuilder",
    "TclScriptType",
    "TemplateRenderer",
    "find_placeholders",
    "substitute",
    "write_script",
]
