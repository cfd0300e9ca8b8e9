"""
Channel pairing.

Turns the up and down endpoints discovered on the target into the ordered
list of ChannelDecoders that become dashboard tabs.
"""

from typing import TYPE_CHECKING, Callable, Optional, Sequence, TypeVar

from .channel import ChannelDecoder
from .formats import DataFormat
from .structured import StructuredLogAdapter
from ..errors import ChannelError, ConfigError

if TYPE_CHECKING:
    from ..config import ChannelConfig
    from ..transport.base import Endpoint, UpEndpoint, DownEndpoint

E = TypeVar("E", bound="Endpoint")


def pull_channel(channels: list[E], number: Optional[int]) -> Optional[E]:
    """Remove and return the endpoint with channel `number` from `channels`"""
    if number is None:
        return None
    for i, channel in enumerate(channels):
        if channel.number == number:
            return channels.pop(i)
    return None


def build_decoders(
    up_channels: Sequence["UpEndpoint"],
    down_channels: Sequence["DownEndpoint"],
    configs: Sequence["ChannelConfig"] = (),
    show_timestamps: bool = False,
    structured_factory: Optional[Callable[[], StructuredLogAdapter]] = None,
) -> list[ChannelDecoder]:
    """
    Pair endpoints into decoders.

    With explicit `configs`, one decoder is built per entry in the given
    order, pulling endpoints by channel number. Without, every up channel
    becomes a TEXT tab (paired with the down channel of the same number if
    there is one) and each remaining down channel becomes a write-only tab.

    Raises:
        ChannelError: if no tab could be built, or a configured entry matches
            no endpoint on the target
        ConfigError: if a structured channel is configured without a frame decoder
    """
    ups = list(up_channels)
    downs = list(down_channels)
    tabs: list[ChannelDecoder] = []

    if configs:
        # Tab index i is the F-key and log file index of configs[i]
        for config in configs:
            label = config.name or f"up={config.up}, down={config.down}"
            if config.format is DataFormat.STRUCTURED and structured_factory is None:
                raise ConfigError(
                    f"Channel '{label}' uses the structured format "
                    "but no frame decoder is configured"
                )

            up = pull_channel(ups, config.up)
            down = pull_channel(downs, config.down)
            if up is None and down is None:
                raise ChannelError(
                    f"Configured channel '{label}' (up={config.up}, down={config.down}) "
                    "not found on target"
                )

            structured = structured_factory() if config.format is DataFormat.STRUCTURED else None

            tabs.append(ChannelDecoder(
                up,
                down,
                name=config.name,
                data_format=config.format,
                show_timestamps=show_timestamps,
                structured=structured,
            ))
    else:
        for up in ups:
            tabs.append(ChannelDecoder(
                up,
                pull_channel(downs, up.number),
                show_timestamps=show_timestamps,
            ))

        for down in downs:
            tabs.append(ChannelDecoder(None, down, show_timestamps=show_timestamps))

    # Code further along relies on at least one tab existing
    if not tabs:
        raise ChannelError("Failed to initialize RTT UI: No RTT channels configured")

    return tabs
