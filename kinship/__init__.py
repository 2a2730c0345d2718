"""Kinship - family relationship graph and derivation engine."""

__version__ = "0.1.0"
