"""Shared fixtures for civic data tests."""

from typing import Any, Optional

import pytest

from civic_data.models import DataPointSpec, FetchOutcome, SourceDescriptor


def make_descriptor(
    source_id: str,
    weight: float = 1,
    endpoint: Optional[str] = "https://api.example/x",
    field_path: Optional[str] = None,
) -> SourceDescriptor:
    return SourceDescriptor(
        id=source_id,
        name=source_id.upper(),
        public_url=f"https://example.org/{source_id}",
        endpoint=endpoint,
        field_path=field_path,
        weight=weight,
    )


def ok(source_id: str, value: Any, weight: float = 1) -> FetchOutcome:
    return FetchOutcome.succeeded(make_descriptor(source_id, weight), value)


def failed(source_id: str, error: str = "Connection refused", weight: float = 1) -> FetchOutcome:
    return FetchOutcome.failed(make_descriptor(source_id, weight), error)


def skipped(source_id: str, weight: float = 1) -> FetchOutcome:
    return FetchOutcome.skip(make_descriptor(source_id, weight, endpoint=None))


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float):
        self.delays.append(delay)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def population_spec():
    """Two-source population data point, weights 1 and 3."""
    return DataPointSpec(
        key="population",
        description="Washington State total population",
        unit="people",
        reconciliation_method="weighted-average",
        sources=[
            make_descriptor("census", weight=1, endpoint="https://api.example/census", field_path="population"),
            make_descriptor("ofm", weight=3, endpoint="https://api.example/ofm", field_path="data.total"),
        ],
    )
