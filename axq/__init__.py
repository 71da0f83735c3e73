"""axq: query and drive the macOS accessibility tree."""

__version__ = "0.1.0"
