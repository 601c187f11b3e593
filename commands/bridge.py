"""The long-running bridge command."""

import asyncio
import logging

import click

from commands.helpers import get_config
from core.directory import JsonAccessoryDirectory
from core.fleet import FleetReconciler
from models.utils import power_label
from models.capabilities import ACTIVE

logger = logging.getLogger('bravia.bridge')


def _log_update(name: str):
    def listener(characteristic, value):
        if characteristic == ACTIVE:
            logger.info("%s power %s", name, power_label(value))
        else:
            logger.info("%s input %s", name, value)
    return listener


async def run_bridge(reconciler: FleetReconciler, stop_event: asyncio.Event | None = None):
    """Reconcile the fleet and run until stop_event is set (or forever)."""
    controllers = reconciler.reconcile(start=True)
    if not controllers:
        logger.warning("No usable TVs configured.")
        return

    for controller in controllers:
        controller.subscribe(_log_update(controller.name))

    stop_event = stop_event or asyncio.Event()
    try:
        await stop_event.wait()
    finally:
        await reconciler.close()


@click.command(name='run')
@click.pass_context
def run_command(ctx):
    """Run the bridge: poll power and keep channel maps fresh for every TV.

    Loads favourites, syncs the accessory directory with the configured TVs
    and keeps running until interrupted.

    \b
    Example:
      bravia-favourites run
      bravia-favourites --debug run
    """
    config = get_config(ctx)
    directory = JsonAccessoryDirectory(config.accessories_file)
    reconciler = FleetReconciler(config, directory)

    click.echo("Starting bridge... (Press Ctrl+C to stop)\n")
    try:
        asyncio.run(run_bridge(reconciler))
    except KeyboardInterrupt:
        click.echo("\n\nBridge stopped.")
