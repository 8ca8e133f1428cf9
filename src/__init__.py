# src/__init__.py — v1
"""recordkit: tabular records with discovered schemas.

Field names are canonicalized and resolved through a shared Dictionary,
record sets can be sorted, filtered, merged across schemas and combined
on equal keys.
"""

from recordkit.version import __version__

__all__ = ["__version__"]
