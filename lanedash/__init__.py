"""Tilt-steered car game and peripheral drivers for a framebuffer Linux board."""

__version__ = "0.1.0"