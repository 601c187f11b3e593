"""
Control commands for one-shot power and channel changes.
"""

import asyncio

import click

from commands.helpers import get_device_controller
from core.errors import BraviaError
from models.utils import is_tunable_number, normalise_channel_number


@click.command()
@click.argument('tv_name')
@click.option('--on/--off', default=True, help='Turn the TV on or off')
@click.pass_context
def power_command(ctx, tv_name: str, on: bool):
    """Turn a TV ON or OFF.

    \b
    Examples:
      bravia-favourites power "Living Room" --on
      bravia-favourites power "Living Room" --off
    """
    controller = get_device_controller(ctx, tv_name)
    status = "ON" if on else "OFF"

    try:
        asyncio.run(controller.set_power(on))
    except BraviaError as e:
        click.secho(f"✗ Failed to turn {controller.name} {status}: {e}", fg='red', err=True)
        ctx.exit(1)

    click.echo(f"✓ {controller.name} turned {status}")


@click.command()
@click.argument('tv_name')
@click.argument('channel')
@click.pass_context
def tune_command(ctx, tv_name: str, channel: str):
    """Tune a TV to one of the favourite channels.

    \b
    Examples:
      bravia-favourites tune "Living Room" 1
      bravia-favourites tune "Living Room" 231
    """
    number = normalise_channel_number(channel)
    if number is None:
        click.secho(f"✗ '{channel}' is not a channel number", fg='red', err=True)
        ctx.exit(1)

    controller = get_device_controller(ctx, tv_name)
    if not is_tunable_number(number) or controller.capabilities.channel_for(int(number)) is None:
        click.secho(f"✗ Channel {number} is not one of the favourites", fg='red', err=True)
        ctx.exit(1)

    try:
        uri = asyncio.run(controller.select_channel(int(number)))
    except BraviaError as e:
        click.secho(f"✗ Failed to tune {controller.name} to {number}: {e}", fg='red', err=True)
        ctx.exit(1)

    if uri is None:
        click.secho(f"✗ No content URI for channel {number} on source {controller.device.tv_source}",
                    fg='red', err=True)
        ctx.exit(1)

    click.echo(f"✓ {controller.name} tuned to {number}")
