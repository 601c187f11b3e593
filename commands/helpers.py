"""Shared helpers for CLI commands."""

import click

from core.config import PlatformConfig, load_platform_config
from core.controller import DeviceController
from core.directory import AccessoryEntry
from core.errors import ConfigError
from core.log import setup_logging
from models.favourites import load_favourites
from models.utils import device_identity


def get_config(ctx: click.Context) -> PlatformConfig:
    """Load the platform config, exiting with an error message if it's invalid."""
    try:
        config = load_platform_config(ctx.obj['config_path'])
    except ConfigError as e:
        click.secho(f"✗ {e}", fg='red', err=True)
        click.echo("Run 'setup' to check your configuration.", err=True)
        ctx.exit(1)

    if config.debug:
        setup_logging(debug=True)
    return config


def get_device_controller(ctx: click.Context, name: str) -> DeviceController:
    """Build a (not started) controller for one configured TV."""
    config = get_config(ctx)
    device = config.find_device(name)
    if device is None:
        click.secho(f"✗ TV '{name}' not found in config", fg='red', err=True)
        names = [tv.get('name') for tv in config.tvs if isinstance(tv, dict) and tv.get('name')]
        if names:
            click.echo(f"Configured TVs: {', '.join(names)}", err=True)
        ctx.exit(1)

    favourites, error = load_favourites(config.favourites_file, config.max_favourites)
    if error:
        click.secho(f"⚠ {error}", fg='yellow', err=True)

    entry = AccessoryEntry(identity=device_identity(device.name, device.ip),
                           name=device.name, device=device, favourites=favourites)
    controller = DeviceController(device, favourites, entry, psk=config.psk,
                                  poll_interval_ms=config.poll_interval_ms)
    controller.rebuild_capabilities()
    return controller
