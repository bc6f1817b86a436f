"""Feature packages (repository + service + schemas per domain)."""
