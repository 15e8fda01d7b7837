"""Reconciliation strategies and audit trail entries."""
