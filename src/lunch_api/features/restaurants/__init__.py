"""Restaurants and menus."""
