"""Source descriptor store and runtime settings."""
