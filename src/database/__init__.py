"""Remote item table access."""
