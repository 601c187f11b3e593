#!/usr/bin/env python3
"""
Bravia Favourites Bridge
Expose favourite broadcast channels of Sony Bravia TVs as selectable inputs
and mirror each TV's power state.
"""

from pathlib import Path

import click

from core.config import USER_CONFIG_FILE
from core.log import setup_logging

# Import commands from command modules
from commands.bridge import run_command
from commands.control import power_command, tune_command
from commands.inspection import (
    favourites_command,
    status_command,
    channels_command,
    accessories_command
)
from commands.setup import setup_command, init_favourites_command


@click.group(
    context_settings={
        'help_option_names': ['-h', '--help'],
        'max_content_width': 999  # Very wide to prevent wrapping on wide terminals
    }
)
@click.version_option(version='0.1.0', prog_name='Bravia Favourites')
@click.option('--config', 'config_path', type=click.Path(path_type=Path),
              default=USER_CONFIG_FILE, show_default=True, help='Configuration file')
@click.option('--debug', is_flag=True, help='Show debug logging')
@click.pass_context
def cli(ctx, config_path: Path, debug: bool):
    """Bravia Favourites - Favourite channels and power for Sony Bravia TVs.

Configuration: ~/.bravia_favourites/config.json (psk, tvs, favouritesFile, ...)
The pre-shared key can also come from 1Password (item "Bravia", field "psk").

Run 'setup' to check configuration, then 'run' to start the bridge."""
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path
    ctx.obj['debug'] = debug
    setup_logging(debug)


# Register setup commands
cli.add_command(setup_command, name='setup')
cli.add_command(init_favourites_command, name='init-favourites')

# Register bridge command
cli.add_command(run_command, name='run')

# Register control commands
cli.add_command(power_command, name='power')
cli.add_command(tune_command, name='tune')

# Register inspection commands
cli.add_command(favourites_command, name='favourites')
cli.add_command(status_command, name='status')
cli.add_command(channels_command, name='channels')
cli.add_command(accessories_command, name='accessories')


if __name__ == '__main__':
    cli()
