"""
Civic data acquisition and reconciliation engine.

Fetches numeric civic/fiscal indicators from several upstream sources,
reconciles them into one value with a confidence score, and persists a
snapshot with an audit trail.

Modules:
    models - Source, outcome, reconciled point, audit and snapshot records
    errors - Acquisition and persistence error types
    config - Source descriptor store and environment settings
    ingest - Source fetching, field extraction, health and orchestration
    reconcile - Reconciliation strategies and audit entries
    storage - Snapshot writer and cached-artifact fallback
    pipeline - Normalization of legacy per-source files
    provider - Read-side data context for rendering consumers
    cli - Command-line interface entrypoints
"""
