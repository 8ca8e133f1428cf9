# src/records/__init__.py — v1
"""Dictionary, record definitions, records and record sets."""
