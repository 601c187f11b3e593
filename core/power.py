"""Power state polling.

Polls the TV on a fixed interval and reports only changes. A failed poll
leaves the known state alone; a TV that drops off the network is not
assumed to be off.
"""

import asyncio
import logging

from core.errors import BraviaError

logger = logging.getLogger('bravia.power')

DEFAULT_POLL_INTERVAL_MS = 5000


class PowerMonitor:
    """Polls getPowerStatus and calls on_change when the state flips."""

    def __init__(self, rpc, on_change, interval_ms: int = DEFAULT_POLL_INTERVAL_MS, name: str = ''):
        self.rpc = rpc
        self.on_change = on_change
        self.interval_ms = interval_ms
        self.name = name
        self.power: bool | None = None
        self._stopping = False

    @property
    def stopping(self) -> bool:
        return self._stopping

    async def poll_once(self) -> bool:
        """Run one poll.

        Returns:
            True if the state changed and on_change was called
        """
        try:
            status = await asyncio.to_thread(self.rpc.get_power_status)
        except BraviaError as e:
            logger.debug("%s power poll error: %s", self.name, e)
            return False

        is_on = status == 'active'
        if self.power == is_on:
            return False

        self.power = is_on
        self.on_change(is_on)
        return True

    async def run(self):
        """Poll until stop() is called.

        A poll that is in flight when stop() is called completes, but no
        further poll is scheduled after it.
        """
        while not self._stopping:
            await self.poll_once()
            if self._stopping:
                break
            await asyncio.sleep(self.interval_ms / 1000)

    def stop(self):
        self._stopping = True
