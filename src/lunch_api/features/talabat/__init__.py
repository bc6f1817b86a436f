"""Talabat delivery platform: catalog sync and group order placement."""
