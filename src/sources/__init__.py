# src/sources/__init__.py — v1
"""Record sources and sinks."""
