"""Audit trail entries for reconciled data points."""

from typing import List, Optional, Sequence

from ..models import AuditEntry, DataPointSpec, FetchOutcome, ReconciliationResult, utc_now_iso
from .reconciler import attempted_count


def build_entry(
    spec: DataPointSpec,
    outcomes: Sequence[FetchOutcome],
    result: ReconciliationResult,
    timestamp_utc: Optional[str] = None,
) -> AuditEntry:
    """
    Record how a data point's value was derived.

    sourceCount is the number of dispatched sources; successCount the number
    whose fetch succeeded, whether or not the strategy could use the value.
    """
    return AuditEntry(
        data_point_key=spec.key,
        timestamp_utc=timestamp_utc or utc_now_iso(),
        confidence=result.confidence,
        method=result.method,
        source_count=attempted_count(outcomes),
        success_count=sum(1 for o in outcomes if o.success),
    )


class AuditTrail:
    """
    Position-indexed audit log.

    Entries land in the slot of their data point's configuration position, so
    the final order is configuration order regardless of completion order.
    Duplicate keys keep one entry per position.
    """

    def __init__(self, size: int):
        self._slots: List[Optional[AuditEntry]] = [None] * size

    def record(self, position: int, entry: AuditEntry) -> None:
        self._slots[position] = entry

    def entries(self) -> List[AuditEntry]:
        return [e for e in self._slots if e is not None]
