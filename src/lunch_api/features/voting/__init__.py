"""Daily restaurant voting."""
