"""Supplier evaluation and selection engine (ISO 9001 style scoring)."""

__version__ = "0.1.0"
