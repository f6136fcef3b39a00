"""
Dining reservation provider API client.

Two read-only endpoints are used:

- ``GET {base}/restaurants`` lists every venue with its id and booking URL.
- ``GET {base}/openings/{start}%7C{id}%7C{party}%7C{stay}`` lists, per date,
  how many openings each meal period has.

Requests are not retried. A failed directory fetch is fatal to startup and a
failed openings fetch only skips that venue for the current check pass, so
both surface as exceptions for the caller to classify.
"""

import asyncio
import logging
import time
from typing import Optional, List, Dict, Any

import aiohttp

from dining_watch.models.dining_models import (
    OpeningRecord, ReservationQuery, Target, VenueDirectoryEntry
)
from dining_watch.utils.logger import get_performance_logger

logger = logging.getLogger(__name__)


class DiningError(Exception):
    """Base exception for dining provider errors."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class DiningAPIError(DiningError):
    """Transport failures and non-success HTTP statuses."""
    pass


class DiningParseError(DiningError):
    """Response body was not in the expected shape."""
    pass


class DiningClient:
    """
    Async client for the dining reservation provider.

    The session is created lazily and reused across check passes; call
    ``close()`` (or use the client as an async context manager) on shutdown.
    """

    def __init__(self,
                 base_url: str = "https://mousedining.com/v1",
                 timeout: float = 30.0,
                 user_agent: str = "Dining-Watch/1.0"):
        """
        Initialize dining API client.

        Args:
            base_url: Provider API base URL
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.user_agent = user_agent

        self._session: Optional[aiohttp.ClientSession] = None
        self._perf = get_performance_logger('api')

        self._stats = {
            'requests_made': 0,
            'requests_failed': 0
        }

        logger.debug(f"Dining client initialized for {self.base_url}")

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        """Ensure HTTP session is created."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=10,
                limit_per_host=10,
                ttl_dns_cache=300
            )

            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=self.timeout,
                headers={
                    'User-Agent': self.user_agent,
                    'Accept': 'application/json'
                }
            )

    async def close(self):
        """Close HTTP session and cleanup resources."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def build_openings_url(self, venue_id: str, query: ReservationQuery) -> str:
        """
        Build the openings URL for one venue.

        The provider takes start date, venue id, party size and stay length
        as a single ``|`` separated path segment.
        """
        descriptor = "%7C".join([
            query.start_date.isoformat(),
            str(venue_id),
            str(query.party_size),
            str(query.stay_length_days)
        ])
        return f"{self.base_url}/openings/{descriptor}"

    async def _get_json(self, url: str) -> Any:
        """
        GET ``url`` and decode the JSON body.

        Raises:
            DiningAPIError: On transport errors, timeouts or non-200 status
            DiningParseError: If the body is not valid JSON
        """
        await self._ensure_session()

        start = time.perf_counter()
        self._stats['requests_made'] += 1

        try:
            async with self._session.get(url) as response:
                if response.status != 200:
                    body = await response.text()
                    self._stats['requests_failed'] += 1
                    raise DiningAPIError(
                        f"HTTP {response.status} from {url}: {body[:200]}",
                        code=response.status
                    )

                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    self._stats['requests_failed'] += 1
                    raise DiningParseError(f"Invalid JSON response from {url}: {e}") from e

                self._perf.log_api_call(url, time.perf_counter() - start, response.status)
                return data

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._stats['requests_failed'] += 1
            raise DiningAPIError(f"Request to {url} failed: {e!r}") from e

    async def fetch_directory(self) -> List[VenueDirectoryEntry]:
        """
        Fetch the full venue directory.

        Returns:
            Directory entries in provider order

        Raises:
            DiningAPIError: If the request fails
            DiningParseError: If the response is not a list of records
        """
        data = await self._get_json(f"{self.base_url}/restaurants")

        if not isinstance(data, list):
            raise DiningParseError(f"Expected a list of restaurants, got {type(data).__name__}")

        entries = [
            VenueDirectoryEntry.from_api_response(record)
            for record in data
            if isinstance(record, dict)
        ]

        logger.info(f"Fetched {len(entries)} restaurants from directory")
        return entries

    async def fetch_openings(self, target: Target) -> List[OpeningRecord]:
        """
        Fetch per-date openings for a target.

        Malformed records are skipped with a warning so they never hide
        valid dates in the same response.

        Raises:
            DiningAPIError: If the request fails
            DiningParseError: If the response is not a list
        """
        data = await self._get_json(target.query_url)

        if not isinstance(data, list):
            raise DiningParseError(
                f"Expected a list of openings for {target.name}, got {type(data).__name__}"
            )

        records = []
        for raw in data:
            if not isinstance(raw, dict):
                logger.warning(f"Skipping malformed opening record for {target.name}: {raw!r}")
                continue
            try:
                records.append(OpeningRecord.from_api_response(raw))
            except ValueError as e:
                logger.warning(f"Skipping opening record for {target.name}: {e}")

        return records

    def get_stats(self) -> Dict[str, int]:
        return dict(self._stats)
