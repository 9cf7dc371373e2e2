"""Court booking service: slot grid, availability and booking validation."""

__version__ = "1.0.0"
