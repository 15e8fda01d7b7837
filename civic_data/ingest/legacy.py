"""
Legacy single-endpoint fetch mode with cached-file fallback.

Each key maps to one endpoint (see config.settings.LEGACY_ENDPOINT_ENV).
Fresh responses are archived as data/<key>-<timestamp>.json; when a fetch
fails the latest archived file for that key is referenced instead, marked
ok=false so operators can tell fresh from stale. The index of files used is
written to data/latest.json.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..config.settings import legacy_endpoints
from ..errors import AcquisitionError
from ..storage.fallback import archive_filename, resolve_fallback
from ..storage.snapshot_writer import DEFAULT_DATA_DIR, write_json
from .source_fetcher import SourceFetcher

logger = logging.getLogger(__name__)

INDEX_FILENAME = "latest.json"


@dataclass
class SourceFileRef:
    file: Optional[str]
    ok: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"file": self.file, "ok": self.ok}
        if self.error is not None:
            payload["error"] = self.error
        return payload


async def fetch_key(
    key: str,
    url: str,
    fetcher: SourceFetcher,
    data_dir: Path,
) -> SourceFileRef:
    """Fetch one legacy endpoint, archiving the response or falling back to cache."""
    try:
        logger.info(f"Fetching {key} {url}")
        document = await fetcher.fetch_document(url, label=key)
    except AcquisitionError as e:
        logger.error(f"Error fetching {key}: {e}")
        cached = resolve_fallback(data_dir, key)
        if cached:
            logger.info(f"Using cached {cached}")
        return SourceFileRef(file=cached, ok=False, error=str(e))

    name = archive_filename(key, datetime.now(timezone.utc))
    write_json(data_dir / name, document, overwrite=False)
    return SourceFileRef(file=name, ok=True)


async def run_legacy_fetch(
    endpoints: Optional[Dict[str, str]] = None,
    data_dir: Path = DEFAULT_DATA_DIR,
    fetcher: Optional[SourceFetcher] = None,
) -> Dict[str, Any]:
    """
    Fetch every legacy endpoint and write the index document.

    Returns:
        Index {fetchedAt, sources: {key: {file, ok, error?}}}

    Raises:
        WriteError: If a fetched file or the index cannot be written
    """
    endpoints = endpoints if endpoints is not None else legacy_endpoints()
    fetcher = fetcher or SourceFetcher()
    data_dir = Path(data_dir)

    index: Dict[str, Any] = {
        "fetchedAt": datetime.now(timezone.utc).isoformat(),
        "sources": {},
    }

    refs = await asyncio.gather(
        *(fetch_key(key, url, fetcher, data_dir) for key, url in endpoints.items())
    )
    for key, ref in zip(endpoints, refs):
        index["sources"][key] = ref.to_dict()

    index_path = write_json(data_dir / INDEX_FILENAME, index)
    logger.info(f"Snapshot written to {index_path}")
    return index


def fetch_legacy(
    endpoints: Optional[Dict[str, str]] = None,
    data_dir: Path = DEFAULT_DATA_DIR,
    fetcher: Optional[SourceFetcher] = None,
) -> Dict[str, Any]:
    """Synchronous entry point for run_legacy_fetch."""
    return asyncio.run(run_legacy_fetch(endpoints, data_dir, fetcher))
