#!/usr/bin/env python3
"""
High-level Tcl builder for the Vivado hardware manager scripts.

One named render exists per command. Each composes the plain
``render(template_name, substitutions)`` primitive with the board profile,
the derived device id and the command's own parameters, translating any
file path through the active platform strategy first.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ..board.device_id import derive_device_id
from ..board.profile import BoardProfile
from ..host.detector import PlatformContext
from ..string_utils import (
    generate_tcl_header_comment,
    log_debug_safe,
    safe_format,
)
from ..utils.size import parse_size
from .template_renderer import TemplateRenderer, write_script

logger = logging.getLogger(__name__)


class TclScriptType(Enum):
    """Script kinds and the template each one is rendered from."""

    AUTODETECT = "info-autodetect"
    INFO = "info"
    FLASH = "flash"
    DUMP = "dump"

    @property
    def filename(self) -> str:
        # Both info variants land in info.tcl
        if self is TclScriptType.AUTODETECT:
            return "info.tcl"
        return f"{self.value}.tcl"


class TclScriptBuilder:
    """Renders command scripts for one platform and writes them to disk."""

    def __init__(
        self,
        platform: PlatformContext,
        template_renderer: Optional[TemplateRenderer] = None,
        output_dir: Optional[Union[str, Path]] = None,
        prefix: str = "TEMPLATE",
    ):
        self.platform = platform
        self.template_renderer = template_renderer or TemplateRenderer()
        self.output_dir = Path(output_dir) if output_dir else Path(".")
        self.prefix = prefix
        self.generated_files: List[Path] = []

    def render(self, template_name: str, substitutions: Mapping[str, Any]) -> str:
        """Substitute every known ``{{KEY}}``; unknown tokens stay verbatim."""
        return self.template_renderer.render_template(template_name, substitutions)

    def board_values(self, profile: BoardProfile) -> Dict[str, str]:
        values = profile.template_values()
        values["FPGA_DEVICE"] = derive_device_id(profile)
        return values

    def _render_named(
        self,
        script_type: TclScriptType,
        profile: BoardProfile,
        extra: Optional[Dict[str, Any]] = None,
    ) -> str:
        substitutions: Dict[str, Any] = self.board_values(profile)
        substitutions.update(extra or {})
        log_debug_safe(
            logger,
            "Generating Tcl script from template: {name}",
            prefix=self.prefix,
            name=script_type.value,
        )
        body = self.template_renderer.render_template(
            script_type.value, substitutions, strict=True
        )
        header = generate_tcl_header_comment(
            safe_format("vivado-fpga-tool {command} script", command=script_type.value),
            board=profile.name,
            fpga_part=profile.fpga_part,
            fpga_device=substitutions["FPGA_DEVICE"],
            flash_part=profile.flash_part,
        )
        return f"{header}\n\n{body}"

    def render_autodetect(self) -> str:
        """The auto-detect script needs no board, so the template is copied as-is."""
        log_debug_safe(
            logger,
            "Generating auto-detect Tcl script from template: {name}",
            prefix=self.prefix,
            name=TclScriptType.AUTODETECT.value,
        )
        return self.template_renderer.template_source(TclScriptType.AUTODETECT.value)

    def render_board_info(self, profile: BoardProfile) -> str:
        return self._render_named(TclScriptType.INFO, profile)

    def render_program_flash(
        self,
        profile: BoardProfile,
        binary_file: Union[str, Path],
        verify: bool = False,
    ) -> str:
        """
        Render the program-flash script.

        ``BINARY_FILE`` and ``BSCAN_BITSTREAM`` are translated to the path
        form Vivado sees, with forward slashes as Tcl expects.
        """
        bscan = profile.bscan_bitstream
        return self._render_named(
            TclScriptType.FLASH,
            profile,
            {
                "BINARY_FILE": self.platform.strategy.tcl_path(binary_file),
                "VERIFY": 1 if verify else 0,
                "BSCAN_BITSTREAM": self.platform.strategy.tcl_path(bscan) if bscan else "",
            },
        )

    def render_read_flash(
        self,
        profile: BoardProfile,
        output_file: Union[str, Path],
        size: Optional[str] = None,
    ) -> str:
        """
        Render the read-flash script.

        The readback size is *size* when given, otherwise the board's
        ``DEFAULT_FLASH_SIZE``.
        """
        readback_size = size or profile.default_flash_size
        return self._render_named(
            TclScriptType.DUMP,
            profile,
            {
                "OUTPUT_FILE": self.platform.strategy.tcl_path(output_file),
                "READBACK_SIZE": readback_size,
                "READBACK_BYTES": parse_size(readback_size),
            },
        )

    def write(self, script_type: TclScriptType, content: str) -> Path:
        """Write *content* as the script file for *script_type* in the output dir."""
        path = write_script(content, self.output_dir / script_type.filename)
        self.generated_files.append(path)
        log_debug_safe(
            logger,
            "Tcl script generated successfully: {path}",
            prefix=self.prefix,
            path=path,
        )
        return path

