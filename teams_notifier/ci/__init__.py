"""CI system detection and build metadata."""
