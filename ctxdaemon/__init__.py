"""Building blocks for a local code-indexing daemon: errors, correlation, sync and CLI helpers."""

__version__ = "0.1.0"

__all__ = [
    "background",
    "cli",
    "clock",
    "converge",
    "correlation",
    "errors",
    "rpc",
]