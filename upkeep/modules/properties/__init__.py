"""Property directory."""
