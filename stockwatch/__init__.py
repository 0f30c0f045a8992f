"""Stock-level monitoring, low-stock alerts and auto-reorder."""

__version__ = "1.0.0"
