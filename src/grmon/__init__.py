"""grmon - live execution-unit monitor for the terminal."""

__version__ = "0.1.0"
