"""Relational frame puzzle trainer."""
__version__ = "1.0.0"
