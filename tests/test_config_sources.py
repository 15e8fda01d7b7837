"""Tests for source configuration loading and validation."""

import json
from pathlib import Path

import pytest

from civic_data.config.settings import get_retry_config, legacy_endpoints, source_override_var
from civic_data.config.sources import build_specs, load_specs, validate_sources_config
from civic_data.errors import ConfigValidationError

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "config" / "schemas" / "sources.schema.json"
SOURCES_PATH = Path(__file__).resolve().parent.parent / "config" / "sources.json"


@pytest.fixture
def config():
    return {
        "dataSources": {
            "population": {
                "description": "Population",
                "unit": "people",
                "reconciliationMethod": "weighted-average",
                "sources": [
                    {"id": "census", "name": "Census", "url": "https://census.gov",
                     "apiUrl": "https://api.example/census", "field": "a.b", "weight": 1},
                    {"id": "manual", "name": "Manual", "url": "https://example.org"},
                ],
            },
            "debt": {
                "description": "Debt",
                "unit": "USD",
                "reconciliation": {"method": "direct"},
                "sources": [],
            },
        }
    }


class TestValidation:
    def test_valid_config(self, config):
        assert validate_sources_config(config, SCHEMA_PATH) is True

    def test_shipped_config_is_valid(self):
        with open(SOURCES_PATH) as f:
            assert validate_sources_config(json.load(f), SCHEMA_PATH) is True

    def test_negative_weight_rejected(self, config):
        config["dataSources"]["population"]["sources"][0]["weight"] = -1
        with pytest.raises(ConfigValidationError):
            validate_sources_config(config, SCHEMA_PATH)

    def test_negative_weight_rejected_without_schema(self, config):
        config["dataSources"]["population"]["sources"][0]["weight"] = -1
        with pytest.raises(ConfigValidationError, match="non-negative"):
            validate_sources_config(config, None)

    def test_missing_unit_rejected(self, config):
        del config["dataSources"]["debt"]["unit"]
        with pytest.raises(ConfigValidationError, match="dataSources.debt"):
            validate_sources_config(config, SCHEMA_PATH)

    def test_missing_data_sources(self):
        with pytest.raises(ConfigValidationError):
            validate_sources_config({}, None)

    def test_duplicate_source_ids(self, config):
        sources = config["dataSources"]["population"]["sources"]
        sources.append(dict(sources[0]))
        with pytest.raises(ConfigValidationError, match="duplicate"):
            validate_sources_config(config, SCHEMA_PATH)


class TestBuildSpecs:
    def test_configuration_order_and_fields(self, config):
        specs = build_specs(config, apply_env_overrides=False)

        assert [s.key for s in specs] == ["population", "debt"]
        census, manual = specs[0].sources
        assert census.endpoint == "https://api.example/census"
        assert census.field_path == "a.b"
        assert census.public_url == "https://census.gov"
        assert manual.endpoint is None
        assert manual.dispatchable is False
        assert manual.weight == 1

    def test_method_resolution(self, config):
        specs = build_specs(config, apply_env_overrides=False)
        assert specs[0].reconciliation_method == "weighted-average"
        assert specs[1].reconciliation_method == "direct"

    def test_method_defaults_to_weighted_average(self, config):
        del config["dataSources"]["population"]["reconciliationMethod"]
        specs = build_specs(config, apply_env_overrides=False)
        assert specs[0].reconciliation_method == "weighted-average"

    def test_env_override(self, config, monkeypatch):
        monkeypatch.setenv(source_override_var("census"), "https://override.example/census")
        specs = build_specs(config)
        assert specs[0].sources[0].endpoint == "https://override.example/census"

    def test_load_specs_from_file(self, config, tmp_path):
        path = tmp_path / "sources.json"
        path.write_text(json.dumps(config))
        assert len(load_specs(path, SCHEMA_PATH)) == 2


class TestSettings:
    def test_override_var_name(self):
        assert source_override_var("census-acs.v2") == "CIVIC_SOURCE_CENSUS_ACS_V2_URL"

    def test_legacy_placeholders(self, monkeypatch):
        monkeypatch.delenv("OFM_BUDGET_URL", raising=False)
        monkeypatch.setenv("LEAP_BILLS_URL", "https://leap.example/bills")

        endpoints = legacy_endpoints()

        assert endpoints["ofm_budget"] == "https://api.mock/wa/ofm/budget"
        assert endpoints["leap_bills"] == "https://leap.example/bills"

    def test_retry_config_from_yaml(self, tmp_path):
        path = tmp_path / "ingest.yaml"
        path.write_text("retry:\n  max_attempts: 5\n  base_delay_seconds: 0.25\n")

        retry = get_retry_config(str(path))

        assert retry["max_attempts"] == 5
        assert retry["base_delay_seconds"] == 0.25
        assert retry["timeout_seconds"] == 15

    def test_retry_config_defaults(self, tmp_path):
        retry = get_retry_config(str(tmp_path / "missing.yaml"))
        assert retry == {"max_attempts": 3, "base_delay_seconds": 1.0, "timeout_seconds": 15.0}
