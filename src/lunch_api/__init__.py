"""Lunch voting, group ordering and payment settlement backend."""

__version__ = "0.1.0"
