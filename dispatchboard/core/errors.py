"""Custom exceptions used across the dispatch board."""


class DispatchBoardError(Exception):
    """Base error for the application."""


class ConfigError(DispatchBoardError):
    """Configuration related error."""


class SpreadsheetError(DispatchBoardError):
    """Raised when a dispatch spreadsheet cannot be read."""


class AlertPlaybackError(DispatchBoardError):
    """Raised when the alert tone is rejected by the playback device."""
