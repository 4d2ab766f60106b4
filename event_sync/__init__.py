"""Incremental GitHub event synchronizer with an append-only JSON Lines log."""

__version__ = "0.1.0"
