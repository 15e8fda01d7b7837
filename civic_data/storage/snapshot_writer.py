"""
Snapshot persistence.

Each run writes one snapshot twice: to the "latest" path (overwritten every
run) and to an archive file named snapshot-<timestamp>.json that is never
overwritten.
"""

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import WriteError
from ..models import Snapshot
from .fallback import archive_filename

logger = logging.getLogger(__name__)

DEFAULT_PUBLIC_DIR = Path("public")
DEFAULT_DATA_DIR = Path("data")
LATEST_FILENAME = "data.json"
SNAPSHOT_PREFIX = "snapshot"


@dataclass(frozen=True)
class WrittenSnapshot:
    latest_path: Path
    archive_path: Path


def write_json(path: Path, payload: Dict[str, Any], overwrite: bool = True) -> Path:
    """
    Write JSON atomically (temp file + rename).

    Raises:
        WriteError: On any filesystem or serialization failure (including
        NaN or infinite numbers), or when the target exists and overwrite
        is False
    """
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if not overwrite and path.exists():
            raise WriteError(str(path), "archive already exists")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, allow_nan=False)
        os.replace(tmp_path, path)
    except WriteError:
        raise
    except (OSError, TypeError, ValueError) as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise WriteError(str(path), str(e), original_error=e) from e
    return path


def write_snapshot(
    snapshot: Snapshot,
    public_dir: Path = DEFAULT_PUBLIC_DIR,
    data_dir: Path = DEFAULT_DATA_DIR,
    now: Optional[datetime] = None,
) -> WrittenSnapshot:
    """
    Persist the snapshot as the latest artifact and as an archive copy.

    Raises:
        WriteError: If either file cannot be written
    """
    now = now or datetime.now(timezone.utc)
    payload = snapshot.to_dict()

    # Archive first: a name collision must leave the previous latest file intact
    archive_path = write_json(
        Path(data_dir) / archive_filename(SNAPSHOT_PREFIX, now),
        payload,
        overwrite=False,
    )
    logger.info(f"Archived snapshot to {archive_path}")

    latest_path = write_json(Path(public_dir) / LATEST_FILENAME, payload)
    logger.info(f"Wrote {latest_path}")

    return WrittenSnapshot(latest_path=latest_path, archive_path=archive_path)
