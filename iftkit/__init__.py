"""Building blocks for incremental font transfer: sparse bit sets, font tables and binary helpers."""

__version__ = "0.1.0"