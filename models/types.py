"""Type definitions for the Bravia favourites bridge.

This module provides the records shared across the application: favourites,
per-TV device configuration, and the loosely-typed content list entries
returned by the TV.
"""

from dataclasses import dataclass, field

DEFAULT_PORT = 80
DEFAULT_TV_SOURCE = 'tv:dvbt'  # UK Freeview


@dataclass(frozen=True)
class Favourite:
    """A named channel number from the favourites file."""
    name: str
    number: str

    def to_dict(self) -> dict:
        return {'name': self.name, 'number': self.number}

    @classmethod
    def from_dict(cls, data: dict) -> 'Favourite':
        return cls(name=str(data['name']), number=str(data['number']))


@dataclass(frozen=True)
class DeviceConfig:
    """Connection settings for one TV."""
    name: str
    ip: str
    port: int = DEFAULT_PORT
    tv_source: str = DEFAULT_TV_SOURCE

    @classmethod
    def from_dict(cls, data: dict) -> 'DeviceConfig':
        """Build from a config dict, accepting the camelCase keys used in config files.

        Missing name/ip come through as empty strings so callers can decide
        whether to skip the device.
        """
        tv_source = (data.get('tvSource') or data.get('tvsource')
                     or data.get('tv_source') or DEFAULT_TV_SOURCE)
        return cls(
            name=str(data.get('name') or '').strip(),
            ip=str(data.get('ip') or '').strip(),
            port=int(data.get('port') or DEFAULT_PORT),
            tv_source=str(tv_source),
        )

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'ip': self.ip,
            'port': self.port,
            'tvSource': self.tv_source,
        }


@dataclass(frozen=True)
class ContentEntry:
    """One item from a getContentList result. Every field is optional."""
    uri: str | None = None
    title: str | None = None
    disp_num: str | None = None

    @classmethod
    def from_item(cls, item) -> 'ContentEntry':
        if not isinstance(item, dict):
            return cls()

        def text(key):
            value = item.get(key)
            return None if value is None else str(value)

        return cls(uri=text('uri'), title=text('title'), disp_num=text('dispNum'))


@dataclass
class RebuildResult:
    """Subtypes touched by a capability rebuild."""
    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
