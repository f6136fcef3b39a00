"""
Resolves configured venue names into pollable targets.

Resolution happens once at startup against the provider directory; the
resulting target list is fixed for the life of the process.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from dining_watch.api.dining_client import DiningClient
from dining_watch.models.dining_models import ReservationQuery, Target, VenueDirectoryEntry

logger = logging.getLogger(__name__)


def resolve_targets(names: Iterable[str],
                    directory: Iterable[VenueDirectoryEntry],
                    query: ReservationQuery,
                    openings_url_builder: Callable[[str, ReservationQuery], str]) -> List[Target]:
    """
    Match configured names against the directory.

    Matching is exact. When the directory lists a name more than once the
    first entry is used. Names with no match are logged and skipped.

    Args:
        names: Venue names in configuration order
        directory: Directory entries in provider order
        query: Search parameters shared by every target
        openings_url_builder: Builds the openings URL from a venue id and query

    Returns:
        One target per matched name, in configuration order
    """
    by_name: Dict[str, VenueDirectoryEntry] = {}
    for entry in directory:
        by_name.setdefault(entry.name, entry)

    targets = []
    for name in names:
        entry = by_name.get(name)
        if entry is None:
            logger.warning(f"Restaurant not found: {name}")
            continue

        targets.append(Target(
            name=entry.name,
            venue_id=entry.venue_id,
            query_url=openings_url_builder(entry.venue_id, query),
            deep_link=entry.booking_url
        ))

    return targets


class TargetResolver:
    """Fetches the directory and resolves configured names."""

    def __init__(self,
                 client: DiningClient,
                 query: ReservationQuery,
                 logger: Optional[logging.Logger] = None):
        self.client = client
        self.query = query
        self.logger = logger or logging.getLogger(__name__)

    async def resolve(self, names: List[str]) -> List[Target]:
        """
        Resolve ``names`` into targets.

        Raises:
            DiningAPIError: If the directory cannot be fetched
        """
        directory = await self.client.fetch_directory()
        targets = resolve_targets(names, directory, self.query, self.client.build_openings_url)

        self.logger.info(f"Resolved {len(targets)} of {len(names)} restaurants")
        for target in targets:
            self.logger.debug(f"Target {target.name} ({target.venue_id}): {target.query_url}")

        return targets
