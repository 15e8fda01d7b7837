"""
Normalize legacy per-source files into a single artifact.

Reads data/latest.json (produced by the legacy fetch) and the files it
references. Any missing index, missing file or unparsable file falls back to
the latest archived file for that key; a key with nothing cached stays at
its empty default. Fast and idempotent for a fixed set of input files.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..ingest.legacy import INDEX_FILENAME
from ..storage.fallback import load_cached, read_json_maybe, resolve_fallback
from ..storage.snapshot_writer import DEFAULT_DATA_DIR, DEFAULT_PUBLIC_DIR, write_json

logger = logging.getLogger(__name__)

NORMALIZED_FILENAME = "normalized.json"


def read_index(data_dir: Path) -> Optional[Dict[str, Any]]:
    index = read_json_maybe(Path(data_dir) / INDEX_FILENAME)
    return index if isinstance(index, dict) else None


def load_source_document(data_dir: Path, index: Optional[Dict[str, Any]], key: str) -> Optional[Any]:
    """
    Load the document for a key, preferring the file named in the index.

    Falls back to the latest "<key>-*" file when the indexed file is absent
    or unparsable.
    """
    data_dir = Path(data_dir)
    ref = ((index or {}).get("sources") or {}).get(key) or {}
    name = ref.get("file") if isinstance(ref, dict) else None

    if name:
        document = read_json_maybe(data_dir / name)
        if document is not None:
            return document
        logger.warning(f"Indexed file {name} for {key} unusable; trying cache")

    cached = resolve_fallback(data_dir, key)
    if cached and cached != name:
        return read_json_maybe(data_dir / cached)
    return None


def normalize_budget_rows(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "label": row.get("program") or row.get("label"),
            "value": row.get("amount") or row.get("value") or 0,
            "wages": row.get("wages") or 0,
            "capital": row.get("capital") or 0,
            "equipment": row.get("equipment") or 0,
        }
        for row in rows
    ]


def build_normalized(data_dir: Path, generated_at: Optional[str] = None) -> Dict[str, Any]:
    """Assemble the normalized output from whatever files are available."""
    data_dir = Path(data_dir)
    index = read_index(data_dir)
    if index is None:
        logger.warning(f"No usable {INDEX_FILENAME}; relying on cached files")

    output: Dict[str, Any] = {
        "generatedAt": generated_at or datetime.now(timezone.utc).isoformat(),
        "population": None,
        "budget": [],
        "bills": [],
        "counties": {},
    }

    budget = load_source_document(data_dir, index, "ofm_budget")
    if isinstance(budget, dict) and isinstance(budget.get("budget"), list):
        output["budget"] = normalize_budget_rows(budget["budget"])

    bills = load_source_document(data_dir, index, "leap_bills")
    if isinstance(bills, dict) and isinstance(bills.get("bills"), list):
        output["bills"] = bills["bills"]

    census = load_source_document(data_dir, index, "census")
    if isinstance(census, dict) and census.get("population_total"):
        output["population"] = census["population_total"]

    counties = load_source_document(data_dir, index, "counties")
    if isinstance(counties, dict):
        output["counties"] = counties.get("counties") or counties

    # Last resort: any archived budget file, used verbatim
    if not output["budget"]:
        for prefix in ("ofm_budget", "budget"):
            document = load_cached(data_dir, prefix)
            if isinstance(document, dict) and isinstance(document.get("budget"), list):
                output["budget"] = document["budget"]
                break

    return output


def normalize(
    data_dir: Path = DEFAULT_DATA_DIR,
    public_dir: Path = DEFAULT_PUBLIC_DIR,
    output_name: str = NORMALIZED_FILENAME,
) -> Path:
    """
    Build and write the normalized artifact.

    Raises:
        WriteError: If the output cannot be written
    """
    output = build_normalized(data_dir)
    out_path = write_json(Path(public_dir) / output_name, output)
    logger.info(f"Wrote {out_path}")
    return out_path
