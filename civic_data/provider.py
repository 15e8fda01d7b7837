"""
Read-side access to the reconciled artifact.

A DataContext is created once by a consumer and passed to whatever renders
data points; there is no module-level "last loaded" state.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .models import ReconciledDataPoint, Snapshot
from .storage.fallback import read_json_maybe, resolve_fallback
from .storage.snapshot_writer import DEFAULT_DATA_DIR, DEFAULT_PUBLIC_DIR, LATEST_FILENAME, SNAPSHOT_PREFIX

logger = logging.getLogger(__name__)


@dataclass
class DataContext:
    snapshot: Optional[Snapshot] = None
    source_path: Optional[Path] = None
    is_fallback: bool = False
    data_points: Dict[str, ReconciledDataPoint] = field(default_factory=dict)

    @classmethod
    def load(
        cls,
        public_dir: Path = DEFAULT_PUBLIC_DIR,
        data_dir: Path = DEFAULT_DATA_DIR,
    ) -> "DataContext":
        """
        Load the live artifact, or the latest archived snapshot if it is
        absent, unparsable or not shaped like a snapshot. Returns an empty
        context when neither is usable.
        """
        live_path = Path(public_dir) / LATEST_FILENAME
        context = cls._from_file(live_path, is_fallback=False)
        if context is not None:
            return context

        logger.warning(f"Failed to load live data from {live_path}")
        archived = resolve_fallback(data_dir, SNAPSHOT_PREFIX)
        if archived:
            context = cls._from_file(Path(data_dir) / archived, is_fallback=True)
            if context is not None:
                logger.info(f"Using archived snapshot {archived}")
                return context

        return cls()

    @classmethod
    def _from_file(cls, path: Path, is_fallback: bool) -> Optional["DataContext"]:
        payload = read_json_maybe(path)
        if not isinstance(payload, dict):
            return None
        try:
            return cls._from_payload(payload, path, is_fallback)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.error(f"Unexpected snapshot shape in {path}: {e!r}")
            return None

    @classmethod
    def _from_payload(cls, payload: Dict[str, Any], path: Path, is_fallback: bool) -> "DataContext":
        snapshot = Snapshot.from_dict(payload)
        return cls(
            snapshot=snapshot,
            source_path=path,
            is_fallback=is_fallback,
            data_points=dict(snapshot.data_points),
        )

    @property
    def loaded(self) -> bool:
        return self.snapshot is not None

    def get_data_point(self, key: str) -> Optional[ReconciledDataPoint]:
        return self.data_points.get(key)

    def get_value(self, key: str) -> Any:
        point = self.get_data_point(key)
        return point.value if point else None
