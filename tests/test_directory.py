"""Tests for the JSON accessory directory in core/directory.py"""

import json

import pytest
from core.directory import AccessoryEntry, JsonAccessoryDirectory
from models.capabilities import CapabilitySet
from models.types import DeviceConfig, Favourite


def make_entry(identity, name='TV', favourites=None):
    caps = CapabilitySet()
    caps.rebuild(favourites or [])
    return AccessoryEntry(identity=identity, name=name,
                          device=DeviceConfig(name=name, ip='10.0.0.1'),
                          favourites=list(favourites or []), capabilities=caps)


class TestJsonAccessoryDirectory:
    """Test entry storage and persistence."""

    def test_missing_file_is_empty(self, tmp_path):
        directory = JsonAccessoryDirectory(tmp_path / 'accessories.json')
        assert directory.all_ids() == []
        assert directory.find('x') is None

    def test_upsert_persists(self, tmp_path, favourites):
        path = tmp_path / 'accessories.json'
        directory = JsonAccessoryDirectory(path)

        directory.upsert(make_entry('a', 'Lounge', favourites))

        reloaded = JsonAccessoryDirectory(path)
        entry = reloaded.find('a')
        assert entry.name == 'Lounge'
        assert entry.favourites == favourites
        assert set(entry.capabilities.inputs) == {'fav:1', 'fav:2', 'fav:231'}

    def test_upsert_replaces(self, tmp_path):
        directory = JsonAccessoryDirectory(tmp_path / 'accessories.json')
        directory.upsert(make_entry('a', 'Old'))
        directory.upsert(make_entry('a', 'New'))

        assert directory.all_ids() == ['a']
        assert directory.find('a').name == 'New'

    def test_remove_batch(self, tmp_path):
        path = tmp_path / 'accessories.json'
        directory = JsonAccessoryDirectory(path)
        for identity in ('a', 'b', 'c'):
            directory.upsert(make_entry(identity))

        directory.remove_batch(['b', 'c', 'missing'])

        assert directory.all_ids() == ['a']
        assert JsonAccessoryDirectory(path).all_ids() == ['a']

    def test_corrupt_file_ignored(self, tmp_path):
        path = tmp_path / 'accessories.json'
        path.write_text('{not json', encoding='utf-8')

        assert JsonAccessoryDirectory(path).all_ids() == []

    @pytest.mark.parametrize('content', ['[]', 'null', '"x"', '{"accessories": 5}'])
    def test_unexpected_json_ignored(self, tmp_path, content):
        path = tmp_path / 'accessories.json'
        path.write_text(content, encoding='utf-8')

        assert JsonAccessoryDirectory(path).all_ids() == []

    def test_entry_without_device_skipped(self, tmp_path):
        path = tmp_path / 'accessories.json'
        good = make_entry('a').to_dict()
        path.write_text(json.dumps({'accessories': [{'identity': 'b', 'device': None}, good]}),
                        encoding='utf-8')

        assert JsonAccessoryDirectory(path).all_ids() == ['a']

    def test_malformed_entry_skipped(self, tmp_path):
        path = tmp_path / 'accessories.json'
        good = make_entry('a').to_dict()
        path.write_text(json.dumps({'accessories': [{'name': 'no identity'}, good]}), encoding='utf-8')

        assert JsonAccessoryDirectory(path).all_ids() == ['a']

    def test_entry_round_trip(self, favourites):
        entry = make_entry('a', 'Lounge', favourites)
        entry.capabilities.active = True

        restored = AccessoryEntry.from_dict(entry.to_dict())

        assert restored.identity == 'a'
        assert restored.device == entry.device
        assert restored.capabilities.active is True
