#!/usr/bin/env python3
"""
Rendering of Vivado Tcl automation scripts.

Templates are plain Tcl with ``{{KEY}}`` tokens. Rendering replaces every
exact ``{{KEY}}`` token whose key is in the substitution set and passes
everything else through unchanged, so Tcl braces such as ``{{a 1} {b 2}}``,
``{%08X}`` or ``{#...}`` are never interpreted. A key missing from the
substitution set leaves its token verbatim. Callers that must never hand a
partially rendered script to Vivado pass ``strict=True``.

Templates are located through a Jinja2 ``FileSystemLoader`` but are not
compiled as Jinja2 templates.
"""

import logging
import re
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from ..constants import TEMPLATE_DIR
from ..exceptions import FileIOError, TemplateNotFoundError, TemplateRenderError
from ..string_utils import log_debug_safe, safe_format

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".tcl.j2"

PLACEHOLDER_RE = re.compile(r"\{\{([A-Za-z_][A-Za-z0-9_]*)\}\}")


def find_placeholders(text: str) -> List[str]:
    """Names of every ``{{NAME}}`` token left in *text*, in order, deduplicated."""
    seen: List[str] = []
    for name in PLACEHOLDER_RE.findall(text):
        if name not in seen:
            seen.append(name)
    return seen


def substitute(text: str, substitutions: Mapping[str, Any]) -> str:
    """Replace each ``{{KEY}}`` whose key is in *substitutions* with ``str(value)``."""

    def _replace(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key in substitutions:
            return str(substitutions[key])
        return match.group(0)

    return PLACEHOLDER_RE.sub(_replace, text)


class TemplateRenderer:
    """
    Loads ``<name>.tcl.j2`` files from the template directory and renders
    them with a flat ``{KEY: value}`` substitution set.
    """

    def __init__(
        self,
        template_dir: Optional[Union[str, Path]] = None,
        *,
        prefix: str = "TEMPLATE",
    ):
        self.template_dir = Path(template_dir or TEMPLATE_DIR)
        self.prefix = prefix
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            keep_trailing_newline=True,
            autoescape=False,
        )
        log_debug_safe(
            logger,
            "Template renderer initialized with directory: {template_dir}",
            prefix=prefix,
            template_dir=self.template_dir,
        )

    @staticmethod
    def template_filename(template_name: str) -> str:
        if template_name.endswith(TEMPLATE_SUFFIX):
            return template_name
        return template_name + TEMPLATE_SUFFIX

    def template_source(self, template_name: str) -> str:
        """Raw template text, unrendered.

        Raises:
            TemplateNotFoundError: If the template file does not exist
        """
        filename = self.template_filename(template_name)
        try:
            source, _filename, _uptodate = self.env.loader.get_source(self.env, filename)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(
                safe_format(
                    "Tcl template not found: {path}",
                    path=self.template_dir / filename,
                )
            ) from e
        return source

    def render_template(
        self,
        template_name: str,
        substitutions: Mapping[str, Any],
        *,
        strict: bool = False,
    ) -> str:
        """
        Render a named template.

        Args:
            template_name: Template name with or without the ``.tcl.j2`` suffix
            substitutions: Placeholder values; values are inserted as ``str()``
            strict: Fail if any ``{{NAME}}`` token survives rendering

        Returns:
            Rendered script text

        Raises:
            TemplateNotFoundError: If the template file does not exist
            TemplateRenderError: In strict mode, if placeholders remain
        """
        source = self.template_source(template_name)
        for key, value in substitutions.items():
            log_debug_safe(
                logger,
                "  Substituting: {{{{{key}}}}} -> {value}",
                prefix=self.prefix,
                key=key,
                value=value,
            )
        text = substitute(source, substitutions)
        if strict:
            self.check_complete(text, template_name)
        return text

    def check_complete(self, text: str, template_name: str = "<inline>") -> None:
        leftover = find_placeholders(text)
        if leftover:
            raise TemplateRenderError(
                safe_format(
                    "Unresolved placeholders in template '{template_name}': {names}",
                    template_name=template_name,
                    names=", ".join(leftover),
                )
            )


def write_script(content: str, out_path: Union[str, Path]) -> Path:
    """Write *content* to *out_path* atomically.

    Raises:
        FileIOError: If the file cannot be written
    """
    out_path = Path(out_path)
    tmp = out_path.with_suffix(out_path.suffix + ".tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
        tmp.replace(out_path)
    except OSError as e:
        raise FileIOError(
            safe_format("Failed to write Tcl script: {path}", path=out_path)
        ) from e
    return out_path
