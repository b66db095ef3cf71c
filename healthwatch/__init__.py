"""Server health metrics: CPU, memory, disk and host information, with alert rendering and policies."""

__version__ = "0.1.0"

__all__ = ["__version__"]