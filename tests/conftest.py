"""Pytest configuration and fixtures for Bravia favourites tests."""

import json

import pytest
from pathlib import Path

from core.directory import AccessoryEntry
from models.capabilities import CapabilitySet
from models.types import DeviceConfig, Favourite
from models.utils import device_identity


class FakeRpc:
    """Stand-in for RpcClient that records calls instead of using the network.

    Queued results that are exceptions are raised instead of returned.
    """

    def __init__(self, power_statuses=None, content=None):
        self.calls = []
        self.power_statuses = list(power_statuses or [])
        self.content = list(content or [])
        self.content_error = None
        self.set_power_error = None
        self.play_error = None
        self.after_power_poll = None

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    def get_power_status(self):
        self.calls.append(('getPowerStatus',))
        result = self.power_statuses.pop(0) if self.power_statuses else 'standby'
        if self.after_power_poll:
            self.after_power_poll()
        if isinstance(result, Exception):
            raise result
        return result

    def set_power_status(self, on):
        self.calls.append(('setPowerStatus', on))
        if self.set_power_error:
            raise self.set_power_error

    def get_content_list(self, source):
        self.calls.append(('getContentList', source))
        if self.content_error:
            raise self.content_error
        return self.content

    def set_play_content(self, uri):
        self.calls.append(('setPlayContent', uri))
        if self.play_error:
            raise self.play_error


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def make_rpc():
    """Factory for FakeRpc instances."""
    return FakeRpc


@pytest.fixture
def favourites():
    return [
        Favourite('BBC One', '1'),
        Favourite('BBC Two', '2'),
        Favourite('BBC News', '231'),
    ]


@pytest.fixture
def device():
    return DeviceConfig(name='Living Room', ip='192.168.1.50')


@pytest.fixture
def entry(device):
    return AccessoryEntry(identity=device_identity(device.name, device.ip),
                          name=device.name, device=device, capabilities=CapabilitySet())


@pytest.fixture
def content_list():
    """A getContentList result covering each way of finding a channel number."""
    return [
        {'uri': 'tv:dvbt?trip=9018.4165.4228&srvName=BBC One', 'title': 'BBC One', 'dispNum': '001'},
        {'uri': 'tv:dvbt?trip=9018.4165.4287&srvName=BBC Two', 'title': '002 BBC Two'},
        {'uri': 'tv:dvbt?trip=9018.4165.4351&dispNum=231', 'title': 'BBC NEWS'},
        {'title': 'No URI', 'dispNum': '5'},
    ]


@pytest.fixture
def config_file(tmp_path):
    """Write a valid config file pointing every path into tmp_path."""
    path = tmp_path / 'config.json'
    favourites_file = tmp_path / 'favourites.txt'
    favourites_file.write_text("# test\nBBC One=1\nBBC Two=2\nSky=1001\n", encoding='utf-8')
    path.write_text(json.dumps({
        'psk': '0000',
        'favouritesFile': str(favourites_file),
        'accessoriesFile': str(tmp_path / 'accessories.json'),
        'tvs': [{'name': 'Living Room', 'ip': '192.168.1.50'}],
    }), encoding='utf-8')
    return path
