"""
Data models for source descriptors, fetch outcomes and reconciled snapshots.

These are intentionally lightweight (stdlib dataclasses) and serialize to the
camelCase JSON shape consumed by the rendering layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


DEFAULT_METHOD = "weighted-average"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class SourceDescriptor:
    """One upstream origin for a data point. Read-only to the engine."""
    id: str
    name: str
    public_url: str
    endpoint: Optional[str] = None
    field_path: Optional[str] = None
    weight: float = 1.0

    @property
    def dispatchable(self) -> bool:
        return bool(self.endpoint)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceDescriptor":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            public_url=data.get("url", ""),
            endpoint=data.get("apiUrl") or None,
            field_path=data.get("field") or None,
            weight=data.get("weight", 1),
        )


@dataclass(frozen=True)
class DataPointSpec:
    key: str
    description: str
    unit: str
    reconciliation_method: str = DEFAULT_METHOD
    sources: List[SourceDescriptor] = field(default_factory=list)

    @classmethod
    def from_dict(cls, key: str, data: Dict[str, Any]) -> "DataPointSpec":
        method = (
            data.get("reconciliationMethod")
            or (data.get("reconciliation") or {}).get("method")
            or DEFAULT_METHOD
        )
        return cls(
            key=key,
            description=data.get("description", ""),
            unit=data.get("unit", ""),
            reconciliation_method=method,
            sources=[SourceDescriptor.from_dict(s) for s in data.get("sources", [])],
        )


@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of one retrieval for one source in one pass.

    A skipped outcome belongs to a descriptor without an endpoint: it was
    never dispatched and does not count as an attempt.
    """
    source_id: str
    value: Any
    weight: float
    timestamp_utc: str
    success: bool
    error: Optional[str] = None
    source_name: str = ""
    source_url: str = ""
    skipped: bool = False

    @property
    def attempted(self) -> bool:
        return not self.skipped

    @classmethod
    def succeeded(cls, descriptor: SourceDescriptor, value: Any) -> "FetchOutcome":
        return cls(
            source_id=descriptor.id,
            value=value,
            weight=descriptor.weight,
            timestamp_utc=utc_now_iso(),
            success=True,
            source_name=descriptor.name,
            source_url=descriptor.public_url,
        )

    @classmethod
    def failed(cls, descriptor: SourceDescriptor, error: str) -> "FetchOutcome":
        return cls(
            source_id=descriptor.id,
            value=None,
            weight=descriptor.weight,
            timestamp_utc=utc_now_iso(),
            success=False,
            error=error,
            source_name=descriptor.name,
            source_url=descriptor.public_url,
        )

    @classmethod
    def skip(cls, descriptor: SourceDescriptor) -> "FetchOutcome":
        return cls(
            source_id=descriptor.id,
            value=None,
            weight=descriptor.weight,
            timestamp_utc=utc_now_iso(),
            success=False,
            source_name=descriptor.name,
            source_url=descriptor.public_url,
            skipped=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.source_id,
            "name": self.source_name,
            "url": self.source_url,
            "success": self.success,
            "skipped": self.skipped,
            "error": self.error,
            "value": self.value,
            "weight": self.weight,
            "timestamp": self.timestamp_utc,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FetchOutcome":
        return cls(
            source_id=data["id"],
            value=data.get("value"),
            weight=data.get("weight", 1),
            timestamp_utc=data.get("timestamp", ""),
            success=bool(data.get("success")),
            error=data.get("error"),
            source_name=data.get("name", ""),
            source_url=data.get("url", ""),
            skipped=bool(data.get("skipped", False)),
        )


@dataclass(frozen=True)
class ReconciliationResult:
    value: Any
    confidence: float
    method: str


@dataclass
class ReconciledDataPoint:
    key: str
    description: str
    unit: str
    value: Any
    confidence: float
    method: str
    timestamp_utc: str
    sources: List[FetchOutcome] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "description": self.description,
            "unit": self.unit,
            "value": self.value,
            "confidence": self.confidence,
            "method": self.method,
            "timestamp": self.timestamp_utc,
            "sources": [s.to_dict() for s in self.sources],
        }

    @classmethod
    def from_dict(cls, key: str, data: Dict[str, Any]) -> "ReconciledDataPoint":
        return cls(
            key=data.get("key", key),
            description=data.get("description", ""),
            unit=data.get("unit", ""),
            value=data.get("value"),
            confidence=data.get("confidence", 0),
            method=data.get("method", "none"),
            timestamp_utc=data.get("timestamp", ""),
            sources=[FetchOutcome.from_dict(s) for s in data.get("sources", [])],
        )


@dataclass(frozen=True)
class AuditEntry:
    data_point_key: str
    timestamp_utc: str
    confidence: float
    method: str
    source_count: int
    success_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataPointKey": self.data_point_key,
            "timestamp": self.timestamp_utc,
            "confidence": self.confidence,
            "method": self.method,
            "sourceCount": self.source_count,
            "successCount": self.success_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditEntry":
        return cls(
            data_point_key=data["dataPointKey"],
            timestamp_utc=data.get("timestamp", ""),
            confidence=data.get("confidence", 0),
            method=data.get("method", "none"),
            source_count=data.get("sourceCount", 0),
            success_count=data.get("successCount", 0),
        )


@dataclass
class Snapshot:
    """Complete output of one reconciliation run."""
    fetched_at_utc: str
    data_points: Dict[str, ReconciledDataPoint] = field(default_factory=dict)
    audit_trail: List[AuditEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fetchedAt": self.fetched_at_utc,
            "dataPoints": {k: v.to_dict() for k, v in self.data_points.items()},
            "auditTrail": [a.to_dict() for a in self.audit_trail],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        return cls(
            fetched_at_utc=data.get("fetchedAt", ""),
            data_points={
                k: ReconciledDataPoint.from_dict(k, v)
                for k, v in (data.get("dataPoints") or {}).items()
            },
            audit_trail=[AuditEntry.from_dict(a) for a in data.get("auditTrail", [])],
        )
