"""
Setup commands: configuration check and favourites file seeding.
"""

from pathlib import Path

import click

from core.config import DEFAULT_FAVOURITES_FILE, load_config_file, parse_platform_config
from core.errors import ConfigError
from models.favourites import ensure_favourites_file, load_favourites
from models.types import DeviceConfig
from models.utils import device_identity


@click.command(name='setup')
@click.pass_context
def setup_command(ctx):
    """Check the configuration file and show what the bridge will use."""
    config_path = ctx.obj['config_path']

    click.echo()
    click.secho("=== Configuration Check ===", fg='cyan', bold=True)
    click.echo()
    click.echo(f"Config file: {config_path}")

    try:
        config = parse_platform_config(load_config_file(config_path))
    except ConfigError as e:
        click.secho(f"✗ {e}", fg='red')
        click.echo()
        click.echo("Example config:")
        click.echo('  {"psk": "0000", "tvs": [{"name": "Living Room", "ip": "192.168.1.50"}]}')
        click.echo()
        ctx.exit(1)

    click.secho("✓ Pre-shared key found", fg='green')
    click.echo(f"Poll interval: {config.poll_interval_ms} ms")
    click.echo(f"Accessories:   {config.accessories_file}")

    favourites, error = load_favourites(config.favourites_file, config.max_favourites)
    if error:
        click.secho(f"⚠ {error}", fg='yellow')
        click.echo("  Run 'init-favourites' to create a starter file.")
    else:
        click.secho(f"✓ {len(favourites)} favourites in {config.favourites_file}", fg='green')

    click.echo()
    click.secho("TVs:", fg='cyan')
    for raw in config.tvs:
        device = DeviceConfig.from_dict(raw) if isinstance(raw, dict) else None
        if device is None or not device.name or not device.ip:
            click.secho(f"  ✗ Missing name or ip: {raw!r}", fg='red')
            continue
        click.echo(f"  • {device.name} ({device.ip}:{device.port}, {device.tv_source})")
        click.echo(f"    {device_identity(device.name, device.ip)}")
    click.echo()


@click.command(name='init-favourites')
@click.option('--path', 'path', type=click.Path(path_type=Path),
              help='Favourites file to create (default: from config)')
@click.pass_context
def init_favourites_command(ctx, path: Path | None):
    """Create a starter favourites file if none exists.

    \b
    Format (one per line):
      # comment
      BBC One=1
      BBC News=231
    """
    if path is None:
        try:
            raw = load_config_file(ctx.obj['config_path'])
            path = Path(raw.get('favouritesFile') or DEFAULT_FAVOURITES_FILE).expanduser()
        except ConfigError:
            path = DEFAULT_FAVOURITES_FILE

    if ensure_favourites_file(path):
        click.secho(f"✓ Created starter favourites file at {path}", fg='green')
    elif path.exists():
        click.echo(f"Favourites file already exists: {path}")
    else:
        click.secho(f"✗ Failed to create {path}", fg='red', err=True)
        ctx.exit(1)
