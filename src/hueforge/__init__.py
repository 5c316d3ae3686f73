"""hueforge: render configuration templates for color schemes.

Re-renders are incremental: a ledger of content hashes tells files the user
has edited apart from ones that are safe to regenerate.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
