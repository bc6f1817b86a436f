"""Ad-hoc ordering groups."""
