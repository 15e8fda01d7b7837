"""Snapshot persistence and cached-artifact fallback."""
