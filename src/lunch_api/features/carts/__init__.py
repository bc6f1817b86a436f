"""Per-member carts inside groups."""
