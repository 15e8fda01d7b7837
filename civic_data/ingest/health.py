"""
Source health tracking for acquisition reliability monitoring.

Tracks per-source success/failure history across runs and computes status.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..models import FetchOutcome

logger = logging.getLogger(__name__)

# Health status thresholds
CONSECUTIVE_FAILURES_DEGRADED = 3
CONSECUTIVE_FAILURES_DOWN = 7

# Rolling success-rate window
ROLLING_WINDOW_RUNS = 7

DEFAULT_HEALTH_PATH = Path("data/_meta/sources_health.json")


@dataclass
class SourceHealth:
    """Health status for a single source."""
    source_id: str
    name: str = ""
    last_success_at: Optional[str] = None
    last_failure_at: Optional[str] = None
    consecutive_failures: int = 0
    last_error: Optional[str] = None
    history: List[bool] = field(default_factory=list)  # Last N runs, True = success
    success_rate_last_7: float = 0.0
    status: str = "OK"  # OK, DEGRADED, DOWN

    def update_status(self):
        if self.consecutive_failures >= CONSECUTIVE_FAILURES_DOWN:
            self.status = "DOWN"
        elif self.consecutive_failures >= CONSECUTIVE_FAILURES_DEGRADED:
            self.status = "DEGRADED"
        else:
            self.status = "OK"

    def _push_history(self, ok: bool):
        self.history.append(ok)
        if len(self.history) > ROLLING_WINDOW_RUNS:
            self.history = self.history[-ROLLING_WINDOW_RUNS:]
        self.success_rate_last_7 = sum(self.history) / len(self.history)

    def record_success(self, timestamp: Optional[datetime] = None):
        timestamp = timestamp or datetime.now(timezone.utc)
        self.last_success_at = timestamp.isoformat()
        self.consecutive_failures = 0
        self.last_error = None
        self._push_history(True)
        self.update_status()

    def record_failure(self, error: str, timestamp: Optional[datetime] = None):
        timestamp = timestamp or datetime.now(timezone.utc)
        self.last_failure_at = timestamp.isoformat()
        self.consecutive_failures += 1
        self.last_error = error
        self._push_history(False)
        self.update_status()


@dataclass
class HealthTracker:
    """Tracks health for all sources across runs."""
    sources: Dict[str, SourceHealth] = field(default_factory=dict)
    last_updated_at: Optional[str] = None

    def get_or_create(self, source_id: str, name: str = "") -> SourceHealth:
        if source_id not in self.sources:
            self.sources[source_id] = SourceHealth(source_id=source_id, name=name)
        return self.sources[source_id]

    def record_outcomes(self, outcomes: Sequence[FetchOutcome]):
        """Record one run's dispatched outcomes. Skipped sources are ignored."""
        for outcome in outcomes:
            if not outcome.attempted:
                continue
            health = self.get_or_create(outcome.source_id, outcome.source_name)
            if outcome.success:
                health.record_success()
            else:
                health.record_failure(outcome.error or "unknown error")

    def get_summary(self) -> Dict[str, Any]:
        statuses = {"OK": 0, "DEGRADED": 0, "DOWN": 0}
        for source in self.sources.values():
            statuses[source.status] = statuses.get(source.status, 0) + 1

        degraded_sources = [s.source_id for s in self.sources.values() if s.status == "DEGRADED"]
        down_sources = [s.source_id for s in self.sources.values() if s.status == "DOWN"]

        return {
            "total_sources": len(self.sources),
            "status_counts": statuses,
            "degraded_sources": degraded_sources,
            "down_sources": down_sources,
            "overall_status": "DOWN" if down_sources else ("DEGRADED" if degraded_sources else "OK")
        }

    def to_dict(self) -> Dict:
        return {
            "last_updated_at": self.last_updated_at,
            "sources": {k: asdict(v) for k, v in self.sources.items()},
            "summary": self.get_summary()
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "HealthTracker":
        tracker = cls()
        tracker.last_updated_at = data.get("last_updated_at")

        for source_id, source_data in data.get("sources", {}).items():
            tracker.sources[source_id] = SourceHealth(
                source_id=source_data.get("source_id", source_id),
                name=source_data.get("name", ""),
                last_success_at=source_data.get("last_success_at"),
                last_failure_at=source_data.get("last_failure_at"),
                consecutive_failures=source_data.get("consecutive_failures", 0),
                last_error=source_data.get("last_error"),
                history=source_data.get("history", []),
                success_rate_last_7=source_data.get("success_rate_last_7", 0.0),
                status=source_data.get("status", "OK")
            )

        return tracker


def load_health_tracker(path: Path = DEFAULT_HEALTH_PATH) -> HealthTracker:
    """Load health tracker from disk, or create new one."""
    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                data = json.load(f)
            return HealthTracker.from_dict(data)
        except (json.JSONDecodeError, KeyError, OSError) as e:
            logger.warning(f"Could not load health tracker: {e}")
            return HealthTracker()

    return HealthTracker()


def save_health_tracker(tracker: HealthTracker, path: Path = DEFAULT_HEALTH_PATH) -> bool:
    """Save health tracker to disk. Failures are logged, never raised."""
    tracker.last_updated_at = datetime.now(timezone.utc).isoformat()
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(tracker.to_dict(), f, indent=2)
    except OSError as e:
        logger.warning(f"Could not save health tracker to {path}: {e}")
        return False
    return True
