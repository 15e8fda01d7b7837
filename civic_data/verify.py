"""
Setup verification for the live data system.

Checks:
- config/sources.json exists, is valid JSON and passes schema validation
- config/ingest.yaml is readable (defaults are used otherwise)
- public/data.json exists (or reports that it has not been generated yet)
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List

from .config.settings import get_retry_config
from .config.sources import DEFAULT_SCHEMA_PATH, DEFAULT_SOURCES_PATH, load_sources_config, validate_sources_config
from .errors import ConfigValidationError
from .storage.snapshot_writer import DEFAULT_PUBLIC_DIR, LATEST_FILENAME


@dataclass(frozen=True)
class CheckResult:
    name: str
    passed: bool
    detail: str = ""


def _check(name: str, fn: Callable[[], str]) -> CheckResult:
    try:
        return CheckResult(name=name, passed=True, detail=fn())
    except (OSError, ValueError, ConfigValidationError) as e:
        return CheckResult(name=name, passed=False, detail=str(e))


def run_checks(
    sources_path: Path = DEFAULT_SOURCES_PATH,
    schema_path: Path = DEFAULT_SCHEMA_PATH,
    public_dir: Path = DEFAULT_PUBLIC_DIR,
) -> List[CheckResult]:
    """Run every setup check and return the results in order."""

    def sources_valid() -> str:
        config = load_sources_config(sources_path)
        validate_sources_config(config, schema_path)
        return f"{len(config['dataSources'])} data points mapped"

    def retry_settings() -> str:
        retry = get_retry_config()
        return (
            f"{retry['max_attempts']} attempts, {retry['base_delay_seconds']}s base delay, "
            f"{retry['timeout_seconds']}s timeout"
        )

    def artifact_present() -> str:
        path = Path(public_dir) / LATEST_FILENAME
        if not path.exists():
            return "Not yet created (run: python -m civic_data.cli fetch-live)"
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return f"Found {len(data.get('dataPoints') or {})} data points in {path}"

    return [
        _check(f"{sources_path} valid", sources_valid),
        _check("retry settings", retry_settings),
        _check(f"{Path(public_dir) / LATEST_FILENAME} readable", artifact_present),
    ]


def all_passed(results: List[CheckResult]) -> bool:
    return all(r.passed for r in results)
