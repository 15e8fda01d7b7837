"""
Source fetcher with bounded retries and linear backoff.

Each retrieval is a small state machine scheduled on asyncio:

    ATTEMPTING -> WAITING -> ATTEMPTING -> ... -> SUCCEEDED | EXHAUSTED

The blocking HTTP call runs in a worker thread and backoff waits use
asyncio.sleep, so a slow or dead source never blocks its siblings.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import requests

from ..config.settings import get_retry_config
from ..errors import AcquisitionError, HttpError, ParseError, TransportError
from ..models import FetchOutcome, SourceDescriptor
from .field_extractor import extract

logger = logging.getLogger(__name__)

ACCEPT_HEADERS = {"Accept": "application/json"}

_session = requests.Session()


class RetryState(str, Enum):
    ATTEMPTING = "ATTEMPTING"
    WAITING = "WAITING"
    SUCCEEDED = "SUCCEEDED"
    EXHAUSTED = "EXHAUSTED"


def _is_retryable(error: AcquisitionError) -> bool:
    return isinstance(error, (TransportError, HttpError))


class SourceFetcher:
    """Fetch JSON from source endpoints and classify the outcome."""

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        base_delay_seconds: Optional[float] = None,
        timeout_seconds: Optional[float] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        retry_config = get_retry_config()
        self.max_attempts = max_attempts if max_attempts is not None else retry_config['max_attempts']
        self.base_delay_seconds = (
            base_delay_seconds if base_delay_seconds is not None else retry_config['base_delay_seconds']
        )
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else retry_config['timeout_seconds']
        self.session = session or _session
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Wait after a failed attempt (1-based): attempt * base delay."""
        return attempt * self.base_delay_seconds

    async def fetch(self, descriptor: SourceDescriptor) -> FetchOutcome:
        """
        Retrieve one source's value. Never raises for per-source failures.

        Args:
            descriptor: Source with a non-empty endpoint

        Returns:
            FetchOutcome with success=True and the extracted value, or
            success=False and a human-readable error
        """
        if not descriptor.dispatchable:
            raise ValueError(f"Source {descriptor.id} has no endpoint; callers must skip it")

        logger.info(f"Fetching {descriptor.id} from {descriptor.endpoint}")
        try:
            document = await self.fetch_document(descriptor.endpoint, label=descriptor.id)
            value = extract(document, descriptor.field_path)
        except AcquisitionError as e:
            logger.error(f"Error fetching {descriptor.id}: {e}")
            return FetchOutcome.failed(descriptor, str(e))

        return FetchOutcome.succeeded(descriptor, value)

    async def fetch_document(self, url: str, label: Optional[str] = None) -> Any:
        """
        Retrieve and parse a JSON document with bounded retries.

        Raises:
            AcquisitionError: The last error once attempts are exhausted, or a
            non-retryable error immediately
        """
        label = label or url
        state = RetryState.ATTEMPTING
        attempt = 0
        last_error: Optional[AcquisitionError] = None

        while True:
            if state is RetryState.ATTEMPTING:
                attempt += 1
                try:
                    document = await asyncio.to_thread(self._get_json, url)
                    state = RetryState.SUCCEEDED
                except AcquisitionError as e:
                    last_error = e
                    logger.warning(f"Fetch {label} attempt {attempt}/{self.max_attempts} failed: {e}")
                    if _is_retryable(e) and attempt < self.max_attempts:
                        state = RetryState.WAITING
                    else:
                        state = RetryState.EXHAUSTED
            elif state is RetryState.WAITING:
                await self._sleep(self.backoff_delay(attempt))
                state = RetryState.ATTEMPTING
            elif state is RetryState.SUCCEEDED:
                return document
            else:
                logger.error(f"Giving up on {label} after {attempt} attempt(s): {last_error}")
                raise last_error

    def _get_json(self, url: str) -> Any:
        try:
            resp = self.session.get(url, headers=ACCEPT_HEADERS, timeout=self.timeout_seconds)
        except requests.Timeout as e:
            raise TransportError(f"Timeout after {self.timeout_seconds}s: {e}") from e
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        if not resp.ok:
            raise HttpError(resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON from {url}: {e}") from e
