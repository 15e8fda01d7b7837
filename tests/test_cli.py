"""Tests for the command-line interface and setup verification."""

import json
import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from civic_data.cli import main
from civic_data.errors import WriteError
from civic_data.verify import all_passed, run_checks

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config"


@pytest.fixture
def workspace(tmp_path):
    shutil.copytree(REPO_CONFIG, tmp_path / "config")
    return tmp_path


def common_args(workspace):
    return [
        "--sources", str(workspace / "config" / "sources.json"),
        "--schema", str(workspace / "config" / "schemas" / "sources.schema.json"),
        "--data-dir", str(workspace / "data"),
        "--public-dir", str(workspace / "public"),
    ]


class TestVerify:
    def test_all_checks_pass_before_first_run(self, workspace):
        results = run_checks(
            sources_path=workspace / "config" / "sources.json",
            schema_path=workspace / "config" / "schemas" / "sources.schema.json",
            public_dir=workspace / "public",
        )

        assert all_passed(results)
        assert "data points mapped" in results[0].detail
        assert "Not yet created" in results[2].detail

    def test_missing_config_fails(self, workspace):
        results = run_checks(
            sources_path=workspace / "nope.json",
            schema_path=workspace / "config" / "schemas" / "sources.schema.json",
            public_dir=workspace / "public",
        )
        assert not results[0].passed
        assert not all_passed(results)

    def test_counts_artifact_data_points(self, workspace):
        (workspace / "public").mkdir()
        (workspace / "public" / "data.json").write_text(json.dumps({"dataPoints": {"a": {}, "b": {}}}))

        results = run_checks(
            sources_path=workspace / "config" / "sources.json",
            schema_path=workspace / "config" / "schemas" / "sources.schema.json",
            public_dir=workspace / "public",
        )
        assert "Found 2 data points" in results[2].detail


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_verify_exit_codes(self, workspace):
        assert main(common_args(workspace) + ["verify"]) == 0
        args = common_args(workspace)
        args[1] = str(workspace / "missing.json")
        assert main(args + ["verify"]) == 1

    def test_fetch_live_write_error_exits_nonzero(self, workspace):
        with patch("civic_data.cli.run_live", side_effect=WriteError("public/data.json", "read-only")):
            assert main(common_args(workspace) + ["fetch-live"]) == 1

    def test_fetch_live_invalid_config_exits_nonzero(self, workspace):
        (workspace / "config" / "sources.json").write_text(json.dumps({"dataSources": {"x": {}}}))
        assert main(common_args(workspace) + ["fetch-live", "--no-health"]) == 1

    def test_normalize_runs(self, workspace):
        assert main(common_args(workspace) + ["normalize"]) == 0
        assert (workspace / "public" / "normalized.json").exists()

    def test_fetch_legacy_write_error(self, workspace):
        with patch("civic_data.cli.fetch_legacy", side_effect=WriteError("data/latest.json", "denied")):
            assert main(common_args(workspace) + ["fetch-legacy"]) == 1
