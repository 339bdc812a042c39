"""A low-level hash table with caller-supplied hashing and equality."""

__version__ = "0.1.0"

__all__ = ["entry", "iterators", "raw", "table"]