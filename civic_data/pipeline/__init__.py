"""Normalization of legacy per-source fetch output."""
