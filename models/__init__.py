"""Data models and utility functions.

This package contains:
- types: Favourite, DeviceConfig and content list records
- favourites: Favourites file parsing and seeding
- capabilities: Outward capability surface for one TV
- utils: Utility functions (normalise_channel_number, device_identity, etc.)
"""
