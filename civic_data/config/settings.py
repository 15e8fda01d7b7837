"""
Runtime settings: .env loading, endpoint overrides and retry configuration.

Usage:
    from civic_data.config.settings import get_retry_config, legacy_endpoints

    endpoints = legacy_endpoints()  # env overrides applied

CLI check:
    python -m civic_data.config.settings --check
"""

import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Find .env file - walk up from this file to repo root
_repo_root = Path(__file__).resolve().parent.parent.parent  # civic_data/config/settings.py -> repo root
_env_path = _repo_root / ".env"

if _env_path.exists():
    load_dotenv(_env_path)
else:
    # Also try current working directory
    load_dotenv()


# Default retry configuration (can be overridden by config/ingest.yaml)
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_SECONDS = 1.0
DEFAULT_TIMEOUT_SECONDS = 15

# Legacy single-endpoint mode. Placeholders are non-functional on purpose:
# without an override the fetch fails and the cache fallback is exercised.
LEGACY_ENDPOINT_ENV = {
    "ofm_budget": ("OFM_BUDGET_URL", "https://api.mock/wa/ofm/budget"),
    "leap_bills": ("LEAP_BILLS_URL", "https://api.mock/wa/leap/bills"),
    "census": ("CENSUS_API_URL", "https://api.mock/census/wa"),
    "legislature": ("LEGISLATURE_API_URL", "https://api.mock/leg/wa"),
}

PLACEHOLDER_HOST = "api.mock"


def load_ingest_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load ingestion configuration from config/ingest.yaml.

    Returns:
        Config dict or empty dict if file not found
    """
    config_paths = [path] if path else [
        "config/ingest.yaml",
        str(_repo_root / "config" / "ingest.yaml"),
    ]

    for candidate in config_paths:
        if os.path.exists(candidate):
            try:
                with open(candidate, 'r') as f:
                    return yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load ingest config from {candidate}: {e}")

    return {}


def get_retry_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Get retry configuration, preferring config/ingest.yaml over defaults.

    Returns:
        Dict with max_attempts, base_delay_seconds, timeout_seconds
    """
    retry_config = load_ingest_config(path).get('retry', {}) or {}

    return {
        'max_attempts': int(retry_config.get('max_attempts', DEFAULT_MAX_ATTEMPTS)),
        'base_delay_seconds': float(retry_config.get('base_delay_seconds', DEFAULT_BASE_DELAY_SECONDS)),
        'timeout_seconds': float(retry_config.get('timeout_seconds', DEFAULT_TIMEOUT_SECONDS)),
    }


def source_override_var(source_id: str) -> str:
    """Environment variable name that overrides a source's apiUrl."""
    return "CIVIC_SOURCE_" + re.sub(r"[^A-Z0-9]", "_", source_id.upper()) + "_URL"


def source_endpoint_override(source_id: str) -> Optional[str]:
    value = os.environ.get(source_override_var(source_id), "").strip()
    return value or None


def legacy_endpoints() -> Dict[str, str]:
    """Legacy endpoint map with environment overrides applied."""
    endpoints = {}
    for key, (env_var, default) in LEGACY_ENDPOINT_ENV.items():
        endpoints[key] = os.environ.get(env_var, "").strip() or default
    return endpoints


def is_placeholder(url: str) -> bool:
    return PLACEHOLDER_HOST in url


def check_endpoints() -> dict:
    """
    Check which legacy endpoints are configured.

    Returns:
        dict: Status of each env var ("OK" or "PLACEHOLDER")
    """
    status = {}
    endpoints = legacy_endpoints()
    for key, (env_var, _default) in LEGACY_ENDPOINT_ENV.items():
        status[env_var] = "PLACEHOLDER" if is_placeholder(endpoints[key]) else "OK"
    return status


def _cli_check():
    """CLI entry point for --check flag."""
    status = check_endpoints()
    all_ok = True

    for var_name, var_status in status.items():
        print(f"{var_name}: {var_status}")
        if var_status != "OK":
            all_ok = False

    if not all_ok:
        print("\nPlaceholder endpoints always fail; cached files will be used.")
        print("Set the variables above in .env to fetch live data.")
        sys.exit(1)
    else:
        print("\nAll endpoints configured.")
        sys.exit(0)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        description="Check upstream endpoint configuration"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check if endpoint overrides are configured"
    )

    args = parser.parse_args()

    if args.check:
        _cli_check()
    else:
        parser.print_help()
