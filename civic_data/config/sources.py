"""
Source descriptor store loading and validation.

Reads config/sources.json, validates it against
config/schemas/sources.schema.json and builds DataPointSpecs in
configuration order.
"""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from ..errors import ConfigValidationError
from ..models import DataPointSpec
from .settings import source_endpoint_override

logger = logging.getLogger(__name__)

DEFAULT_SOURCES_PATH = Path("config/sources.json")
DEFAULT_SCHEMA_PATH = Path("config/schemas/sources.schema.json")


def load_sources_config(path: Path = DEFAULT_SOURCES_PATH) -> Dict[str, Any]:
    """
    Load the source configuration document.

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is invalid JSON
    """
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def validate_sources_config(
    config: Dict[str, Any],
    schema_path: Optional[Path] = DEFAULT_SCHEMA_PATH,
) -> bool:
    """
    Validate the configuration against the JSON schema.

    Returns:
        True if valid

    Raises:
        ConfigValidationError: If validation fails
    """
    if schema_path is not None and schema_path.exists():
        with open(schema_path) as f:
            schema = json.load(f)
        try:
            jsonschema.validate(config, schema)
        except jsonschema.ValidationError as e:
            path = ".".join(str(p) for p in e.absolute_path)
            where = f" at {path}" if path else ""
            raise ConfigValidationError(f"Schema validation failed{where}: {e.message}")

    # Consistency checks the schema cannot express
    data_sources = config.get("dataSources")
    if not isinstance(data_sources, dict):
        raise ConfigValidationError("'dataSources' must be an object")

    for key, data_point in data_sources.items():
        seen = set()
        for source in data_point.get("sources", []):
            if "id" not in source:
                raise ConfigValidationError(f"{key}: source missing required field: id")
            if source["id"] in seen:
                raise ConfigValidationError(f"{key}: duplicate source id {source['id']}")
            seen.add(source["id"])
            weight = source.get("weight", 1)
            if isinstance(weight, bool) or not isinstance(weight, (int, float)) or weight < 0:
                raise ConfigValidationError(f"{key}.{source['id']}: weight must be a non-negative number")

    return True


def build_specs(config: Dict[str, Any], apply_env_overrides: bool = True) -> List[DataPointSpec]:
    """
    Build DataPointSpecs in configuration order.

    When apply_env_overrides is set, CIVIC_SOURCE_<ID>_URL replaces a
    source's endpoint.
    """
    specs = []
    for key, data_point in config.get("dataSources", {}).items():
        spec = DataPointSpec.from_dict(key, data_point)
        if apply_env_overrides:
            sources = []
            for source in spec.sources:
                override = source_endpoint_override(source.id)
                if override:
                    logger.info(f"Endpoint for {source.id} overridden from environment")
                    source = replace(source, endpoint=override)
                sources.append(source)
            spec = replace(spec, sources=sources)
        specs.append(spec)
    return specs


def load_specs(
    path: Path = DEFAULT_SOURCES_PATH,
    schema_path: Optional[Path] = DEFAULT_SCHEMA_PATH,
) -> List[DataPointSpec]:
    """Load, validate and build DataPointSpecs."""
    config = load_sources_config(path)
    validate_sources_config(config, schema_path)
    return build_specs(config)
