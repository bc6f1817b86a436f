"""Individual orders and the daily group order."""
