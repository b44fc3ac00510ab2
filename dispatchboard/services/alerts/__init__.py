"""Overdue alert service package."""

from .players import AlertPlayer, SilentPlayer, TerminalBellPlayer
from .trigger import AlertTrigger, SoundGate

__all__ = [
    "AlertPlayer",
    "AlertTrigger",
    "SilentPlayer",
    "SoundGate",
    "TerminalBellPlayer",
]
