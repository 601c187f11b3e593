"""Channel number to content URI resolution.

The TV addresses broadcast channels by opaque URIs. This module lists the
tunable content for a source and derives a channel number for each entry,
trying in order:

1. the numeric 'dispNum' field
2. a leading 1-4 digit number in the title ("101 BBC One HD")
3. a dispNum=/channel=/ch= fragment in the URI
"""

import asyncio
import logging
import re
import time
from types import MappingProxyType

from core.errors import BraviaError
from models.types import ContentEntry
from models.utils import normalise_channel_number

logger = logging.getLogger('bravia.channels')

MIN_REFRESH_INTERVAL = 60  # seconds

_TITLE_NUMBER = re.compile(r'^(\d{1,4})\b', re.ASCII)
_URI_NUMBER = re.compile(r'(?:dispNum|channel|ch)=(\d+)', re.ASCII | re.IGNORECASE)


def extract_channel_number(entry: ContentEntry) -> str | None:
    """Derive a normalised channel number from a content entry.

    Returns:
        Channel number string, or None if no tier yields one
    """
    number = normalise_channel_number(entry.disp_num)
    if number is not None:
        return number

    if entry.title:
        match = _TITLE_NUMBER.match(entry.title.strip())
        if match:
            return normalise_channel_number(match.group(1))

    if entry.uri:
        match = _URI_NUMBER.search(entry.uri)
        if match:
            return normalise_channel_number(match.group(1))

    return None


def build_channel_map(items: list) -> dict[str, str]:
    """Build a channel number -> URI map from raw getContentList items.

    Items without a URI or without a derivable number are dropped.
    """
    channel_map = {}
    for item in items:
        entry = ContentEntry.from_item(item)
        if not entry.uri:
            continue
        number = extract_channel_number(entry)
        if number is not None:
            channel_map[number] = entry.uri
    return channel_map


class ChannelResolver:
    """Throttled, refreshable channel map for one TV source."""

    def __init__(self, rpc, source: str, name: str = '', clock=time.monotonic,
                 min_interval: float = MIN_REFRESH_INTERVAL):
        """Initialise ChannelResolver.

        Args:
            rpc: RpcClient for the TV
            source: Content source, e.g. 'tv:dvbt'
            name: TV name used in log messages
            clock: Monotonic time source in seconds
            min_interval: Minimum seconds between content list fetches
        """
        self.rpc = rpc
        self.source = source
        self.name = name
        self.min_interval = min_interval
        self._clock = clock
        self._channel_map: dict[str, str] = {}
        self._last_refresh: float | None = None

    @property
    def channel_map(self):
        """Read-only view of the current map."""
        return MappingProxyType(self._channel_map)

    @property
    def last_refresh(self) -> float | None:
        return self._last_refresh

    async def refresh(self) -> bool:
        """Fetch the content list and rebuild the map.

        Skipped if the previous fetch started less than min_interval ago. The
        timestamp is taken before the network call so a second refresh that
        starts while the first is in flight doesn't fetch again.

        Returns:
            True if a fetch was made, False if throttled

        Raises:
            TransportError, ProtocolError: From the content list call
        """
        now = self._clock()
        if self._last_refresh is not None and now - self._last_refresh < self.min_interval:
            return False
        self._last_refresh = now

        items = await asyncio.to_thread(self.rpc.get_content_list, self.source)
        if not items:
            logger.debug("%s getContentList returned no entries for source=%s", self.name, self.source)
            return True

        self._channel_map = build_channel_map(items)
        logger.debug("%s channel URI map loaded: %d entries", self.name, len(self._channel_map))
        return True

    async def resolve(self, channel_number) -> str | None:
        """Look up the content URI for a channel number.

        Refreshes first when due. A failed refresh is logged and the current
        map is used as-is.

        Returns:
            URI, or None if the channel isn't in the map
        """
        number = normalise_channel_number(channel_number)
        if number is None:
            return None

        try:
            await self.refresh()
        except BraviaError as e:
            logger.debug("%s channel map refresh failed: %s", self.name, e)

        return self._channel_map.get(number)
