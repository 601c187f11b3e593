"""Tests for channel resolution in core/channels.py"""

import asyncio

import pytest

from core.channels import ChannelResolver, build_channel_map, extract_channel_number
from core.errors import TransportError
from models.types import ContentEntry


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestExtractChannelNumber:
    """Test the three-tier channel number extraction."""

    def test_display_number_wins_over_title(self):
        entry = ContentEntry(uri='tv:dvbt?x', title='99 Other Channel', disp_num='12')
        assert extract_channel_number(entry) == '12'

    def test_display_number_normalised(self):
        assert extract_channel_number(ContentEntry(uri='tv:dvbt?x', disp_num='007')) == '7'

    def test_non_numeric_display_number_falls_through(self):
        entry = ContentEntry(uri='tv:dvbt?x', title='101 BBC One HD', disp_num='n/a')
        assert extract_channel_number(entry) == '101'

    def test_non_ascii_display_number_falls_through(self):
        entry = ContentEntry(uri='tv:dvbt?ch=8', title='BBC Four', disp_num='７')
        assert extract_channel_number(entry) == '8'

    def test_title_leading_number(self):
        assert extract_channel_number(ContentEntry(uri='tv:dvbt?x', title=' 004 Channel 4')) == '4'

    def test_title_number_must_end_at_word_boundary(self):
        """'5USA' has no boundary after the digits, so the title gives nothing."""
        assert extract_channel_number(ContentEntry(uri='tv:dvbt?x', title='5USA')) is None

    def test_title_number_longer_than_four_digits_ignored(self):
        assert extract_channel_number(ContentEntry(uri='tv:dvbt?x', title='12345 Test')) is None

    @pytest.mark.parametrize('uri, expected', [
        ('tv:dvbt?trip=1.2.3&dispNum=0231', '231'),
        ('tv:dvbt?CHANNEL=45', '45'),
        ('tv:dvbt?ch=7&x=1', '7'),
    ])
    def test_uri_fragment(self, uri, expected):
        assert extract_channel_number(ContentEntry(uri=uri, title='BBC NEWS')) == expected

    def test_no_number(self):
        assert extract_channel_number(ContentEntry(uri='tv:dvbt?trip=1.2.3', title='BBC NEWS')) is None


class TestBuildChannelMap:
    """Test building the map from raw content list items."""

    def test_builds_from_all_tiers(self, content_list):
        assert build_channel_map(content_list) == {
            '1': 'tv:dvbt?trip=9018.4165.4228&srvName=BBC One',
            '2': 'tv:dvbt?trip=9018.4165.4287&srvName=BBC Two',
            '231': 'tv:dvbt?trip=9018.4165.4351&dispNum=231',
        }

    def test_ignores_junk_items(self):
        assert build_channel_map([None, 'x', {'uri': ''}, {'uri': 'tv:dvbt?a', 'title': 'Radio'}]) == {}


class TestRefresh:
    """Test throttled map refreshes."""

    def test_first_refresh_fetches(self, make_rpc, content_list):
        rpc = make_rpc(content=content_list)
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=FakeClock())

        assert asyncio.run(resolver.refresh()) is True

        assert rpc.calls == [('getContentList', 'tv:dvbt')]
        assert set(resolver.channel_map) == {'1', '2', '231'}

    def test_refresh_throttled_within_window(self, make_rpc, content_list):
        rpc = make_rpc(content=content_list)
        clock = FakeClock()
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=clock)

        asyncio.run(resolver.refresh())
        clock.now += 59
        assert asyncio.run(resolver.refresh()) is False

        assert rpc.count('getContentList') == 1

    def test_refresh_after_window(self, make_rpc, content_list):
        rpc = make_rpc(content=content_list)
        clock = FakeClock()
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=clock)

        asyncio.run(resolver.refresh())
        clock.now += 60
        asyncio.run(resolver.refresh())

        assert rpc.count('getContentList') == 2

    def test_concurrent_refresh_makes_one_call(self, make_rpc, content_list):
        """A second refresh started while the first is in flight fetches nothing."""
        rpc = make_rpc(content=content_list)
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=FakeClock())

        async def scenario():
            return await asyncio.gather(resolver.refresh(), resolver.refresh())

        assert sorted(asyncio.run(scenario())) == [False, True]
        assert rpc.count('getContentList') == 1

    def test_empty_response_keeps_existing_map(self, make_rpc, content_list):
        rpc = make_rpc(content=content_list)
        clock = FakeClock()
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=clock)
        asyncio.run(resolver.refresh())

        rpc.content = []
        clock.now += 60
        asyncio.run(resolver.refresh())

        assert set(resolver.channel_map) == {'1', '2', '231'}

    def test_refresh_replaces_map_wholesale(self, make_rpc, content_list):
        """Channels that disappear from the source don't linger in the map."""
        rpc = make_rpc(content=content_list)
        clock = FakeClock()
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=clock)
        asyncio.run(resolver.refresh())

        rpc.content = [{'uri': 'tv:dvbt?new', 'dispNum': '5'}]
        clock.now += 60
        asyncio.run(resolver.refresh())

        assert dict(resolver.channel_map) == {'5': 'tv:dvbt?new'}

    def test_refresh_error_propagates(self, make_rpc):
        rpc = make_rpc()
        rpc.content_error = TransportError("refused")
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=FakeClock())

        with pytest.raises(TransportError):
            asyncio.run(resolver.refresh())


class TestResolve:
    """Test channel number lookups."""

    @pytest.mark.parametrize('number', ['007', '7', '0007', 7])
    def test_normalises_before_lookup(self, make_rpc, number):
        rpc = make_rpc(content=[{'uri': 'tv:dvbt?seven', 'dispNum': '7'}])
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=FakeClock())

        assert asyncio.run(resolver.resolve(number)) == 'tv:dvbt?seven'

    def test_not_found(self, make_rpc, content_list):
        rpc = make_rpc(content=content_list)
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=FakeClock())

        assert asyncio.run(resolver.resolve('99')) is None

    def test_two_resolves_make_one_fetch(self, make_rpc, content_list):
        rpc = make_rpc(content=content_list)
        clock = FakeClock()
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=clock)

        asyncio.run(resolver.resolve('1'))
        clock.now += 0.5
        asyncio.run(resolver.resolve('2'))

        assert rpc.count('getContentList') == 1

    def test_refresh_failure_uses_stale_map(self, make_rpc, content_list):
        rpc = make_rpc(content=content_list)
        clock = FakeClock()
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=clock)
        asyncio.run(resolver.refresh())

        rpc.content_error = TransportError("reset")
        clock.now += 120

        assert asyncio.run(resolver.resolve('231')) == 'tv:dvbt?trip=9018.4165.4351&dispNum=231'

    def test_very_long_display_number(self, make_rpc):
        rpc = make_rpc(content=[{'uri': 'tv:dvbt?big', 'dispNum': '1' * 5000},
                                {'uri': 'tv:dvbt?one', 'dispNum': '1'}])
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=FakeClock())

        assert asyncio.run(resolver.resolve('1')) == 'tv:dvbt?one'
        assert '1' * 5000 in resolver.channel_map

    def test_invalid_number(self, make_rpc):
        rpc = make_rpc()
        resolver = ChannelResolver(rpc, 'tv:dvbt', clock=FakeClock())

        assert asyncio.run(resolver.resolve('abc')) is None
        assert rpc.calls == []
