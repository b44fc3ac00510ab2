"""Overdue alert trigger gated by a one-way sound permission."""

from __future__ import annotations

import logging
from typing import Iterable

from dispatchboard.core.errors import AlertPlaybackError

from .players import AlertPlayer

LOGGER = logging.getLogger("dispatchboard.alerts")


class SoundGate:
    """Sound permission: starts disabled and can only ever be enabled.

    Playback devices refuse to start until a user gesture unlocks them, so the
    gate is opened by an explicit operator action and never closed again.
    """

    def __init__(self) -> None:
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self._enabled = True


class AlertTrigger:
    """Keeps the alert loop playing exactly while unconfirmed records are overdue."""

    def __init__(
        self,
        player: AlertPlayer,
        *,
        gate: SoundGate | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.player = player
        self.gate = gate or SoundGate()
        self.logger = logger or LOGGER
        self.active_ids: frozenset[str] = frozenset()

    @property
    def sound_enabled(self) -> bool:
        return self.gate.enabled

    def enable_sound(self) -> bool:
        """Unlock playback with a one-off start; returns whether sound is enabled."""

        if self.gate.enabled:
            return True
        try:
            self.player.play()
        except AlertPlaybackError as exc:
            self.logger.error("Alert sound could not be enabled: %s", exc)
            return False
        self.player.rewind()
        self.gate.enable()
        self.logger.info("Alert sound enabled")
        return True

    def update(self, overdue: Iterable[str]) -> bool:
        """Start or stop the loop for the current overdue set; returns whether it is alarming."""

        current = frozenset(overdue)
        if current != self.active_ids:
            newly = current - self.active_ids
            if newly:
                self.logger.warning("Overdue dispatch records: %s", ", ".join(sorted(newly)))
            self.active_ids = current

        if current and self.gate.enabled:
            if not self.player.playing:
                try:
                    self.player.play()
                except AlertPlaybackError as exc:
                    self.logger.error("Alert playback failed: %s", exc)
                    return False
                self.logger.info("Alert started for %d overdue records", len(current))
            return True

        if self.player.playing:
            self.player.pause()
            self.logger.info("Alert stopped")
        self.player.rewind()
        return False
