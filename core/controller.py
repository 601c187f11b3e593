"""DeviceController class for managing one Bravia TV.

This module contains the controller that ties together the JSON-RPC client,
the channel resolver and the power monitor, and exposes the TV's power and
favourite inputs to the host.
"""

import asyncio
import logging
import time

from core.channels import ChannelResolver
from core.errors import BraviaError
from core.power import PowerMonitor, DEFAULT_POLL_INTERVAL_MS
from core.rpc import RpcClient
from models.capabilities import ACTIVE, ACTIVE_IDENTIFIER
from models.types import DeviceConfig, Favourite, RebuildResult

logger = logging.getLogger('bravia.controller')

# The TV is usually still starting up when the bridge starts
INITIAL_REFRESH_DELAY = 2  # seconds
PERIODIC_REFRESH_INTERVAL = 6 * 60 * 60  # seconds


class DeviceController:
    """Power and channel control for one TV."""

    def __init__(self, device: DeviceConfig, favourites: list[Favourite], entry,
                 psk: str = '', rpc: RpcClient | None = None,
                 poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS, clock=time.monotonic):
        """Initialise DeviceController.

        Args:
            device: Connection settings for the TV
            favourites: Favourites to expose as inputs
            entry: AccessoryEntry holding this TV's capabilities
            psk: Pre-shared key (ignored when rpc is given)
            rpc: Optional pre-built RpcClient
            poll_interval_ms: Power poll interval
            clock: Monotonic time source for refresh throttling
        """
        self.device = device
        self.name = device.name
        self.favourites = list(favourites)
        self.entry = entry
        self.capabilities = entry.capabilities
        self.rpc = rpc or RpcClient(device.ip, device.port, psk)

        self.resolver = ChannelResolver(self.rpc, device.tv_source, name=self.name, clock=clock)
        self.monitor = PowerMonitor(self.rpc, self._on_power_change,
                                    interval_ms=poll_interval_ms, name=self.name)

        self._listeners = []
        self._tasks: list[asyncio.Task] = []
        self._built = False
        self._stopped = False

    @property
    def power(self) -> bool:
        return self.capabilities.active

    @property
    def active_identifier(self) -> int:
        return self.capabilities.active_identifier

    def subscribe(self, listener):
        """Register a callable(characteristic, value) for outward updates."""
        self._listeners.append(listener)

    def _notify(self, characteristic: str, value):
        for listener in list(self._listeners):
            try:
                listener(characteristic, value)
            except Exception:
                logger.exception("%s listener failed for %s", self.name, characteristic)

    def _on_power_change(self, is_on: bool):
        self.capabilities.active = is_on
        self._notify(ACTIVE, is_on)

    def rebuild_capabilities(self, favourites: list[Favourite] | None = None) -> RebuildResult:
        """(Re)build the favourite inputs.

        Args:
            favourites: New favourites list (defaults to the current one)

        Returns:
            RebuildResult with added, updated and removed input subtypes
        """
        if favourites is not None:
            self.favourites = list(favourites)

        result = self.capabilities.rebuild(self.favourites)
        self._built = True

        logger.debug("%s loaded %d favourites into inputs (%d added, %d updated, %d removed)",
                     self.name, len(self.capabilities.inputs),
                     len(result.added), len(result.updated), len(result.removed))
        return result

    async def set_power(self, on: bool):
        """Turn the TV on or off.

        Raises:
            TransportError, ProtocolError: The TV rejected or didn't receive the call
        """
        on = bool(on)
        logger.debug("%s setPower(%s)", self.name, on)

        await asyncio.to_thread(self.rpc.set_power_status, on)

        # Keep the monitor in step so the next poll doesn't report this again
        self.monitor.power = on
        self.capabilities.active = on
        self._notify(ACTIVE, on)

    async def select_channel(self, identifier) -> str | None:
        """Select a favourite input and tune the TV to its channel.

        The selection is published before tuning. Identifiers with no
        favourite behind them are accepted without tuning.

        Returns:
            The content URI that was played, or None if nothing was tuned

        Raises:
            TransportError, ProtocolError: The setPlayContent call failed
        """
        try:
            identifier = int(identifier)
        except (TypeError, ValueError):
            identifier = 0

        self.capabilities.active_identifier = identifier
        self._notify(ACTIVE_IDENTIFIER, identifier)

        channel = self.capabilities.channel_for(identifier)
        if channel is None:
            return None

        logger.debug("%s tuning channel %s (identifier %d)", self.name, channel, identifier)

        uri = await self.resolver.resolve(channel)
        if uri is None:
            logger.info("%s no channel URI for %s. Check tvSource (%s) and Live TV availability.",
                        self.name, channel, self.device.tv_source)
            return None

        logger.debug("%s setPlayContent uri=%s", self.name, uri)
        await asyncio.to_thread(self.rpc.set_play_content, uri)
        return uri

    async def handle_set(self, characteristic: str, value) -> bool:
        """Apply a set request from the host.

        Completes exactly once, after the state change, whether or not the
        TV call succeeded. Failures are logged rather than raised.

        Returns:
            True on success, False if the TV call failed
        """
        try:
            if characteristic == ACTIVE:
                await self.set_power(bool(value))
            elif characteristic == ACTIVE_IDENTIFIER:
                await self.select_channel(value)
            else:
                raise ValueError(f"Unknown characteristic: {characteristic}")
        except BraviaError as e:
            logger.warning("%s set %s error: %s", self.name, characteristic, e)
            return False
        return True

    async def _scheduled_refresh(self):
        try:
            await self.resolver.refresh()
        except BraviaError as e:
            logger.debug("%s scheduled channel map refresh failed: %s", self.name, e)

    async def _run_later(self, delay: float, func):
        await asyncio.sleep(delay)
        await func()

    async def _run_every(self, interval: float, func):
        while not self._stopped:
            await asyncio.sleep(interval)
            await func()

    def start(self):
        """Start power polling and channel map refreshes.

        Must be called from a running event loop. If anything fails part way
        through, tasks that were already started are cancelled.
        """
        if self._stopped:
            raise RuntimeError(f"{self.name} controller has been stopped")
        if self._tasks:
            return

        try:
            if not self._built:
                self.rebuild_capabilities()

            loop = asyncio.get_running_loop()
            self._tasks.append(loop.create_task(self.monitor.run(), name=f"{self.name}-power"))
            self._tasks.append(loop.create_task(
                self._run_later(INITIAL_REFRESH_DELAY, self._scheduled_refresh),
                name=f"{self.name}-channels-initial"))
            self._tasks.append(loop.create_task(
                self._run_every(PERIODIC_REFRESH_INTERVAL, self._scheduled_refresh),
                name=f"{self.name}-channels-periodic"))
        except Exception:
            self.stop()
            raise

        logger.debug("%s controller started", self.name)

    def stop(self):
        """Stop polling and cancel scheduled refreshes. Safe to call repeatedly."""
        self._stopped = True
        self.monitor.stop()
        for task in self._tasks:
            if not task.done():
                task.cancel()

    async def close(self):
        """Stop and wait for the background tasks to finish."""
        self.stop()
        tasks, self._tasks = self._tasks, []
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
