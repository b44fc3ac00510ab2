"""Looping alert tone players."""

from __future__ import annotations

import sys
import threading
from typing import Protocol, TextIO

from dispatchboard.core.errors import AlertPlaybackError


class AlertPlayer(Protocol):
    """Minimal looping playback primitive driven by the alert trigger."""

    @property
    def playing(self) -> bool:  # pragma: no cover - interface definition
        ...

    def play(self) -> None:
        """Start (or keep) looping; raises AlertPlaybackError when refused."""

    def pause(self) -> None:
        """Stop looping, keeping the current position."""

    def rewind(self) -> None:
        """Reset the playback position to the start."""


class SilentPlayer:
    """Player that only records what it was asked to do."""

    def __init__(self, *, reject: bool = False) -> None:
        self.reject = reject
        self.position = 0
        self.calls: list[str] = []
        self._playing = False

    @property
    def playing(self) -> bool:
        return self._playing

    def play(self) -> None:
        self.calls.append("play")
        if self.reject:
            raise AlertPlaybackError("playback refused")
        self._playing = True
        self.position += 1

    def pause(self) -> None:
        self.calls.append("pause")
        self._playing = False

    def rewind(self) -> None:
        self.calls.append("rewind")
        self.position = 0


class TerminalBellPlayer:
    """Writes the BEL control character to a stream from a background loop."""

    def __init__(self, stream: TextIO | None = None, interval_sec: float = 1.0) -> None:
        self.stream = stream or sys.stdout
        self.interval_sec = interval_sec
        self.position = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def playing(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _bell(self) -> None:
        self.stream.write("\a")
        self.stream.flush()
        self.position += 1

    def play(self) -> None:
        if self.playing:
            return
        try:
            self._bell()
        except (OSError, ValueError) as exc:
            raise AlertPlaybackError(f"Terminal bell unavailable: {exc}") from exc
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="alert-bell", daemon=True)
        self._thread.start()

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_sec):
            try:
                self._bell()
            except (OSError, ValueError):
                return

    def pause(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval_sec + 1)
            self._thread = None

    def rewind(self) -> None:
        self.position = 0
