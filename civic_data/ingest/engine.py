"""
Live acquisition run: fetch, reconcile, audit, persist.

Flow:
1. Load and validate config/sources.json
2. For each data point, fetch all sources concurrently and wait for all of
   them to settle (no cross-source cancellation)
3. Reconcile the outcomes and record an audit entry in configuration order
4. Record source health (best effort)
5. Write public/data.json and data/snapshot-<timestamp>.json

Nothing is written until every data point has been processed.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..config.sources import DEFAULT_SCHEMA_PATH, DEFAULT_SOURCES_PATH, load_specs
from ..models import (
    AuditEntry,
    DataPointSpec,
    FetchOutcome,
    ReconciledDataPoint,
    Snapshot,
    utc_now_iso,
)
from ..reconcile.audit import AuditTrail, build_entry
from ..reconcile.reconciler import ReconciliationMethod, reconcile
from ..storage.snapshot_writer import DEFAULT_DATA_DIR, DEFAULT_PUBLIC_DIR, WrittenSnapshot, write_snapshot
from .health import DEFAULT_HEALTH_PATH, load_health_tracker, save_health_tracker
from .source_fetcher import SourceFetcher

logger = logging.getLogger(__name__)


async def gather_outcomes(spec: DataPointSpec, fetcher: SourceFetcher) -> List[FetchOutcome]:
    """Fetch every source of a data point concurrently, in configuration order."""

    async def fetch_one(descriptor) -> FetchOutcome:
        if not descriptor.dispatchable:
            logger.info(f"Skipping {descriptor.id} (no API URL)")
            return FetchOutcome.skip(descriptor)
        return await fetcher.fetch(descriptor)

    return list(await asyncio.gather(*(fetch_one(d) for d in spec.sources)))


async def process_data_point(
    spec: DataPointSpec,
    fetcher: SourceFetcher,
) -> Tuple[ReconciledDataPoint, AuditEntry]:
    """Fetch, reconcile and audit one data point."""
    _method, recognized = ReconciliationMethod.resolve(spec.reconciliation_method)
    if not recognized:
        logger.warning(
            f"Unknown reconciliation method '{spec.reconciliation_method}' for {spec.key}; using direct"
        )

    outcomes = await gather_outcomes(spec, fetcher)
    result = reconcile(spec, outcomes)
    timestamp = utc_now_iso()

    point = ReconciledDataPoint(
        key=spec.key,
        description=spec.description,
        unit=spec.unit,
        value=result.value,
        confidence=result.confidence,
        method=result.method,
        timestamp_utc=timestamp,
        sources=outcomes,
    )
    entry = build_entry(spec, outcomes, result, timestamp_utc=timestamp)

    logger.info(f"{spec.key}: {result.value} (confidence: {result.confidence * 100:.1f}%)")
    return point, entry


async def run_reconciliation(
    specs: Sequence[DataPointSpec],
    fetcher: Optional[SourceFetcher] = None,
    concurrent: bool = True,
) -> Snapshot:
    """
    Reconcile every configured data point into a Snapshot.

    Args:
        specs: Data points in configuration order
        fetcher: Source fetcher (default: configured from config/ingest.yaml)
        concurrent: Process data points concurrently; audit order is
            configuration order either way

    Returns:
        Snapshot. Duplicate keys keep both audit entries; the later data
        point wins in the dataPoints map.
    """
    fetcher = fetcher or SourceFetcher()
    fetched_at = utc_now_iso()
    trail = AuditTrail(len(specs))
    points: List[Optional[ReconciledDataPoint]] = [None] * len(specs)

    async def run_slot(position: int, spec: DataPointSpec):
        logger.info(f"=== Fetching {spec.key} ===")
        point, entry = await process_data_point(spec, fetcher)
        points[position] = point
        trail.record(position, entry)

    if concurrent:
        await asyncio.gather(*(run_slot(i, spec) for i, spec in enumerate(specs)))
    else:
        for i, spec in enumerate(specs):
            await run_slot(i, spec)

    snapshot = Snapshot(fetched_at_utc=fetched_at)
    for point in points:
        snapshot.data_points[point.key] = point
    snapshot.audit_trail = trail.entries()
    return snapshot


def record_health(snapshot: Snapshot, health_path: Path = DEFAULT_HEALTH_PATH) -> None:
    """Update the persisted source health tracker from a snapshot."""
    tracker = load_health_tracker(health_path)
    for point in snapshot.data_points.values():
        tracker.record_outcomes(point.sources)
    save_health_tracker(tracker, health_path)

    summary = tracker.get_summary()
    if summary["down_sources"]:
        logger.warning(f"Sources DOWN: {', '.join(summary['down_sources'])}")
    if summary["degraded_sources"]:
        logger.warning(f"Sources DEGRADED: {', '.join(summary['degraded_sources'])}")


def run_live(
    sources_path: Path = DEFAULT_SOURCES_PATH,
    schema_path: Optional[Path] = DEFAULT_SCHEMA_PATH,
    public_dir: Path = DEFAULT_PUBLIC_DIR,
    data_dir: Path = DEFAULT_DATA_DIR,
    health_path: Optional[Path] = DEFAULT_HEALTH_PATH,
    fetcher: Optional[SourceFetcher] = None,
) -> WrittenSnapshot:
    """
    Run one live acquisition pass end to end.

    Raises:
        ConfigValidationError: If the source configuration is invalid
        WriteError: If the snapshot cannot be persisted
    """
    specs = load_specs(sources_path, schema_path)
    logger.info(f"Loaded {len(specs)} data points from {sources_path}")

    snapshot = asyncio.run(run_reconciliation(specs, fetcher))

    if health_path is not None:
        record_health(snapshot, health_path)

    return write_snapshot(snapshot, public_dir=public_dir, data_dir=data_dir)
