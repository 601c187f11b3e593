"""Core functionality for the Bravia favourites bridge.

This package contains:
- rpc: JSON-RPC client for the TV's local control API
- channels: Channel number to content URI resolution
- power: Power state polling
- controller: DeviceController tying the above together for one TV
- directory: Accessory directory interface and JSON implementation
- fleet: Reconciles configured TVs with the accessory directory
- config: Configuration and 1Password integration
- log: Logging setup
"""
