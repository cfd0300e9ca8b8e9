"""
Dashboard widgets.
"""

from .channel_view import TabBar, ChannelView, InputLine
from .chart import SampleChart, render_chart

__all__ = ['TabBar', 'ChannelView', 'InputLine', 'SampleChart', 'render_chart']
