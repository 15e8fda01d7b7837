"""
Cached-artifact fallback.

Archived files embed an ISO-8601 timestamp with ':' and '.' replaced by '-',
so the lexicographic maximum among "<key>-*" names is the most recent one.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


def archive_stamp(moment: datetime) -> str:
    """Filename-safe, sortable timestamp, e.g. 2024-02-01T00-00-00-000Z."""
    iso = moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def archive_filename(key: str, moment: datetime) -> str:
    return f"{key}-{archive_stamp(moment)}.json"


def resolve_fallback(data_dir: Path, key: str) -> Optional[str]:
    """
    Find the most recently archived file for a key.

    Args:
        data_dir: Directory holding archived files
        key: Key prefix; matches files named "<key>-*.json"

    Returns:
        Filename (relative to data_dir), or None when nothing is cached
    """
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        return None

    prefix = f"{key}-"
    candidates = sorted(
        entry.name for entry in data_dir.iterdir()
        if entry.is_file() and entry.name.startswith(prefix) and entry.name.endswith(".json")
    )
    return candidates[-1] if candidates else None


def read_json_maybe(path: Path) -> Optional[Any]:
    """Read a JSON file, returning None when it is missing or unparsable."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Bad JSON in {path}: {e}")
        return None


def load_cached(data_dir: Path, key: str) -> Optional[Any]:
    """Parsed content of the latest archived file for a key, or None."""
    name = resolve_fallback(data_dir, key)
    if name is None:
        return None
    return read_json_maybe(Path(data_dir) / name)
