"""Dropik - catch the good items, dodge the bad ones."""

__version__ = "0.1.0"
