"""
Inspection commands: favourites, power status, channel maps and accessories.
"""

import asyncio

import click

from commands.helpers import get_config, get_device_controller
from core.directory import JsonAccessoryDirectory
from core.errors import BraviaError
from models.favourites import load_favourites
from models.utils import is_tunable_number, power_label


@click.command(name='favourites')
@click.pass_context
def favourites_command(ctx):
    """List the favourites and whether each can be tuned."""
    config = get_config(ctx)
    favourites, error = load_favourites(config.favourites_file, config.max_favourites)

    if error:
        click.secho(f"✗ {error}", fg='red', err=True)
        ctx.exit(1)

    click.echo()
    click.secho(f"=== Favourites ({config.favourites_file}) ===", fg='cyan', bold=True)
    click.echo()

    if not favourites:
        click.echo("No favourites found.")
        click.echo()
        return

    width = max(len(f.number) for f in favourites)
    for favourite in favourites:
        line = f"  {favourite.number:>{width}}  {favourite.name}"
        if is_tunable_number(favourite.number):
            click.echo(line)
        else:
            click.echo(line + click.style("  (not tunable: outside 1-999)", fg='yellow'))
    click.echo()


@click.command(name='status')
@click.argument('tv_name')
@click.pass_context
def status_command(ctx, tv_name: str):
    """Show the current power status of a TV."""
    controller = get_device_controller(ctx, tv_name)

    try:
        status = controller.rpc.get_power_status()
    except BraviaError as e:
        click.secho(f"✗ {controller.name} unreachable: {e}", fg='red', err=True)
        ctx.exit(1)

    is_on = status == 'active'
    colour = 'green' if is_on else 'yellow'
    click.echo(f"{controller.name}: {click.style(power_label(is_on), fg=colour)} ({status})")


@click.command(name='channels')
@click.argument('tv_name')
@click.pass_context
def channels_command(ctx, tv_name: str):
    """Fetch and show the channel number to content URI map for a TV."""
    controller = get_device_controller(ctx, tv_name)

    try:
        asyncio.run(controller.resolver.refresh())
    except BraviaError as e:
        click.secho(f"✗ Failed to fetch channel list: {e}", fg='red', err=True)
        ctx.exit(1)

    channel_map = controller.resolver.channel_map
    click.echo()
    click.secho(f"=== Channels on {controller.name} ({controller.device.tv_source}) ===",
                fg='cyan', bold=True)
    click.echo()

    if not channel_map:
        click.echo("No channels found. Check tvSource and Live TV availability.")
        click.echo()
        return

    favourites = {f.number: f.name for f in controller.favourites}
    width = max(len(n) for n in channel_map)
    for number in sorted(channel_map, key=int):
        line = f"  {number:>{width}}  {channel_map[number]}"
        if number in favourites:
            line += click.style(f"  ★ {favourites[number]}", fg='green')
        click.echo(line)

    missing = [f for f in controller.favourites
               if is_tunable_number(f.number) and f.number not in channel_map]
    if missing:
        click.echo()
        click.secho("Favourites not found on this source:", fg='yellow')
        for favourite in missing:
            click.echo(f"  {favourite.number}  {favourite.name}")
    click.echo()


@click.command(name='accessories')
@click.pass_context
def accessories_command(ctx):
    """List the accessories stored in the directory."""
    config = get_config(ctx)
    directory = JsonAccessoryDirectory(config.accessories_file)
    entries = directory.entries()

    click.echo()
    click.secho("=== Accessories ===", fg='cyan', bold=True)
    click.echo()

    if not entries:
        click.echo("No accessories registered yet. Run 'run' to register the configured TVs.")
        click.echo()
        return

    for entry in entries:
        caps = entry.capabilities
        click.secho(f"{entry.name} ({entry.device.ip}:{entry.device.port})", bold=True)
        click.echo(f"  Identity: {entry.identity}")
        click.echo(f"  Power:    {power_label(caps.active)}")
        click.echo(f"  Input:    {caps.active_identifier}")
        click.echo(f"  Inputs:   {len(caps.inputs)}")
        for source in caps.inputs.values():
            click.echo(f"    {source.identifier:>3}  {source.name}")
        click.echo()
