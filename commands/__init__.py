"""CLI command modules.

This package contains:
- bridge: The long-running bridge (run)
- control: One-shot control commands (power, tune)
- inspection: Inspection commands (favourites, status, channels, accessories)
- setup: Configuration check and favourites seeding (setup, init-favourites)
- helpers: Config and controller helpers shared by the commands
"""
