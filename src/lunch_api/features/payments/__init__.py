"""Payment settlement for closed groups."""
