"""Version information for vivado-fpga-tool."""

__version__ = "1.0.0"
__title__ = "vivado-fpga-tool"
__description__ = "Vivado FPGA SPI Flash Tool"
__license__ = "MIT"
