"""Tests for pairing endpoints into dashboard tabs."""

import pytest

from conftest import FakeUp, FakeDown
from rttdash.config import ChannelConfig
from rttdash.errors import ChannelError, ConfigError
from rttdash.rtt import DataFormat, build_decoders, pull_channel
from rttdash.rtt.structured import FrameTables, StructuredLogAdapter


def structured_factory():
    return StructuredLogAdapter(FrameTables(decode=lambda data, table: None, table=None))


class TestPullChannel:
    """Test removing endpoints by channel number."""

    def test_pull_by_number(self):
        channels = [FakeUp(0), FakeUp(2)]
        pulled = pull_channel(channels, 2)
        assert pulled.number == 2
        assert [c.number for c in channels] == [0]

    def test_pull_missing(self):
        channels = [FakeUp(0)]
        assert pull_channel(channels, 5) is None
        assert pull_channel(channels, None) is None
        assert len(channels) == 1


class TestAutoPairing:
    """Test pairing without explicit channel configuration."""

    def test_same_number_pairs(self):
        """Test that up and down channels with the same number share a tab."""
        ups = [FakeUp(0), FakeUp(2)]
        downs = [FakeDown(0), FakeDown(1)]

        tabs = build_decoders(ups, downs)

        assert len(tabs) == 3
        assert (tabs[0].up.number, tabs[0].down.number) == (0, 0)
        assert (tabs[1].up.number, tabs[1].down) == (2, None)
        assert (tabs[2].up, tabs[2].down.number) == (None, 1)
        assert all(tab.data_format is DataFormat.TEXT for tab in tabs)

    def test_input_lists_untouched(self):
        ups = [FakeUp(0)]
        downs = [FakeDown(0)]
        build_decoders(ups, downs)
        assert len(ups) == 1 and len(downs) == 1

    def test_timestamps_passed_to_tabs(self):
        tabs = build_decoders([FakeUp(0)], [], show_timestamps=True)
        assert tabs[0].show_timestamps

    def test_no_channels(self):
        with pytest.raises(ChannelError, match="No RTT channels configured"):
            build_decoders([], [])


class TestConfiguredPairing:
    """Test pairing from CHANNELS entries."""

    def test_config_order_and_formats(self):
        """Test that tabs follow the configuration order."""
        configs = [
            ChannelConfig(up=1, name="IMU", format=DataFormat.BINARY_LE),
            ChannelConfig(up=0, down=0, name="Terminal"),
        ]

        tabs = build_decoders([FakeUp(0), FakeUp(1)], [FakeDown(0)], configs)

        assert [tab.name for tab in tabs] == ["IMU", "Terminal"]
        assert tabs[0].data_format is DataFormat.BINARY_LE
        assert tabs[1].has_down_channel

    def test_channel_used_once(self):
        """Test that an endpoint claimed by one entry is gone for the next."""
        configs = [ChannelConfig(up=0, name="first"), ChannelConfig(up=0, name="second")]

        with pytest.raises(ChannelError, match="second"):
            build_decoders([FakeUp(0)], [], configs)

    def test_missing_channel_is_fatal(self):
        """Test that an entry matching no endpoint aborts instead of shifting later tabs."""
        configs = [ChannelConfig(up=7, name="ghost"), ChannelConfig(up=0, name="Terminal")]

        with pytest.raises(ChannelError, match=r"'ghost' \(up=7, down=None\) not found on target"):
            build_decoders([FakeUp(0)], [], configs)

    def test_unnamed_missing_channel_reported_by_number(self):
        with pytest.raises(ChannelError, match="up=None, down=4"):
            build_decoders([FakeUp(0)], [FakeDown(0)], [ChannelConfig(down=4)])

    def test_partial_match_keeps_position(self):
        """Test that a tab with only one side found still takes its configured slot."""
        configs = [ChannelConfig(up=1, down=9, name="Shell"), ChannelConfig(up=0, name="Log")]

        tabs = build_decoders([FakeUp(0), FakeUp(1)], [], configs)

        assert [tab.name for tab in tabs] == ["Shell", "Log"]
        assert not tabs[0].has_down_channel

    def test_nothing_matches(self):
        with pytest.raises(ChannelError):
            build_decoders([FakeUp(0)], [], [ChannelConfig(up=3)])

    def test_structured_without_decoder(self):
        configs = [ChannelConfig(up=0, format=DataFormat.STRUCTURED)]
        with pytest.raises(ConfigError):
            build_decoders([FakeUp(0)], [], configs)

    def test_structured_without_decoder_on_missing_channel(self):
        """Test that the missing frame decoder is fatal even when the channel is absent."""
        configs = [ChannelConfig(up=5, format=DataFormat.STRUCTURED), ChannelConfig(up=0)]
        with pytest.raises(ConfigError, match="no frame decoder"):
            build_decoders([FakeUp(0)], [], configs)

    def test_structured_gets_own_adapter(self):
        """Test that each structured tab gets a separate frame buffer."""
        configs = [
            ChannelConfig(up=0, format=DataFormat.STRUCTURED),
            ChannelConfig(up=1, format=DataFormat.STRUCTURED),
        ]

        tabs = build_decoders([FakeUp(0), FakeUp(1)], [], configs, structured_factory=structured_factory)

        assert tabs[0].structured is not tabs[1].structured
