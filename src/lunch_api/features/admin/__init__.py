"""Administrator reporting."""
