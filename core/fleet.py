"""Fleet reconciliation against the accessory directory.

Matches the configured TVs to directory entries: existing entries are
updated in place, new TVs get a new entry, and entries for TVs that are no
longer configured are removed in one batch.
"""

import logging

from core.config import PlatformConfig
from core.controller import DeviceController
from core.directory import AccessoryDirectory, AccessoryEntry
from models.capabilities import CapabilitySet
from models.favourites import ensure_favourites_file, load_favourites
from models.types import DeviceConfig
from models.utils import device_identity

logger = logging.getLogger('bravia.fleet')


class FleetReconciler:
    """Creates, updates and retires one DeviceController per configured TV."""

    def __init__(self, config: PlatformConfig, directory: AccessoryDirectory,
                 loader=load_favourites, controller_factory=DeviceController):
        self.config = config
        self.directory = directory
        self.loader = loader
        self.controller_factory = controller_factory
        self.controllers: list[DeviceController] = []

    def load_favourites(self):
        """Load favourites once for the whole fleet, seeding the file if needed."""
        ensure_favourites_file(self.config.favourites_file)
        favourites, error = self.loader(self.config.favourites_file, self.config.max_favourites)
        if error:
            logger.error(error)
        return favourites

    def reconcile(self, start: bool = True) -> list[DeviceController]:
        """Sync the directory with the configured TVs.

        Controllers from a previous call are stopped first.

        Args:
            start: Start each controller's background tasks (needs a running event loop)

        Returns:
            Controllers for every TV that was configured correctly
        """
        self.stop_all()
        favourites = self.load_favourites()
        configured = set()
        controllers = []

        for raw in self.config.tvs:
            device = DeviceConfig.from_dict(raw) if isinstance(raw, dict) else None
            if device is None or not device.name or not device.ip:
                logger.warning("Skipping TV with missing name or ip: %r", raw)
                continue

            identity = device_identity(device.name, device.ip)
            if identity in configured:
                logger.warning("Skipping duplicate TV %s (%s)", device.name, device.ip)
                continue
            configured.add(identity)

            entry = self.directory.find(identity)
            if entry is not None:
                entry.name = device.name
                entry.device = device
                entry.favourites = list(favourites)
                is_new = False
            else:
                entry = AccessoryEntry(identity=identity, name=device.name, device=device,
                                       favourites=list(favourites), capabilities=CapabilitySet())
                is_new = True

            controller = self.controller_factory(
                device, favourites, entry,
                psk=self.config.psk,
                poll_interval_ms=self.config.poll_interval_ms,
            )
            controller.rebuild_capabilities()
            self.directory.upsert(entry)

            if is_new:
                logger.info("Registered new accessory: %s", device.name)
            else:
                logger.debug("Updated cached accessory: %s", device.name)

            if start:
                controller.start()
            controllers.append(controller)

        stale = [identity for identity in self.directory.all_ids() if identity not in configured]
        if stale:
            logger.info("Removing %d stale accessory(ies)", len(stale))
            self.directory.remove_batch(stale)

        self.controllers = controllers
        return controllers

    def stop_all(self):
        """Stop every controller without waiting for its tasks."""
        for controller in self.controllers:
            controller.stop()

    async def close(self):
        """Stop every controller and save its last known state."""
        self.stop_all()
        for controller in self.controllers:
            await controller.close()
            self.directory.upsert(controller.entry)
