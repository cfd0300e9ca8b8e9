"""
TUI (Terminal User Interface) module for rttdash

Textual front end for the channel dashboard.
"""

from .app import RttDashApp, run_tui
from .notify import NotifyHandler

__all__ = ['RttDashApp', 'run_tui', 'NotifyHandler']
