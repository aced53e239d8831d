"""Incremental merge buffer for the live series.

Each data delivery either replaces the series wholesale or, when deliveries
arrive in quick succession, appends only the new tail. Appending keeps the
rendered series continuous under sub-second polling; a full replace is used
whenever the previous delivery is stale, since index alignment between old
and new payloads can no longer be trusted.
"""

import logging
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from livechart.chart.normalizer import normalize_batch
from livechart.config import ChartSettings
from livechart.models import Candle

logger = logging.getLogger(__name__)


class MergeMode(str, Enum):
    """How a delivery was applied to the buffer."""

    FULL = "full"
    INCREMENTAL = "incremental"
    UNCHANGED = "unchanged"


class MergeResult(BaseModel):
    """Outcome of merging one delivery."""

    buffer: tuple[Candle, ...]
    update_at: Optional[int] = None
    mode: MergeMode

    model_config = {"frozen": True}


def is_incremental(
    current: tuple[Candle, ...],
    previous_update_at: Optional[int],
    now: int,
    realtime_window_ms: int,
) -> bool:
    """Check whether a delivery should be appended rather than replace the series."""
    if previous_update_at is None or not current:
        return False
    return now - previous_update_at < realtime_window_ms


def _dedupe_by_time(candles: list[Candle]) -> list[Candle]:
    """Keep the last candle seen for each time, preserving sorted order."""
    latest: dict[int, Candle] = {}
    for candle in candles:
        latest[candle.time] = candle
    return [c for c in candles if latest[c.time] is c]


def _finalize(candles: list[Candle], settings: ChartSettings) -> tuple[Candle, ...]:
    """Sort by time, optionally dedupe, and keep the most recent `capacity`."""
    ordered = sorted(candles, key=lambda c: c.time)
    if settings.dedupe_by_time:
        ordered = _dedupe_by_time(ordered)
    return tuple(ordered[-settings.capacity:])


def merge(
    current: tuple[Candle, ...],
    incoming: Any,
    previous_update_at: Optional[int],
    now: int,
    settings: Optional[ChartSettings] = None,
) -> MergeResult:
    """Merge a delivery of raw records into the series.

    Args:
        current: The buffer as last rendered.
        incoming: Raw records of the new delivery (the full series so far,
            as upstream sends it).
        previous_update_at: Time of the last applied delivery, if any.
        now: Current time in epoch milliseconds.
        settings: Chart settings (defaults if omitted).

    Returns:
        MergeResult with the next buffer, sorted by time and at most
        `capacity` long. `current` is never modified.
    """
    settings = settings or ChartSettings()

    if not isinstance(incoming, (list, tuple)):
        if incoming is not None:
            logger.warning("Ignoring delivery of type %s", type(incoming).__name__)
        incoming = []

    if not incoming:
        return MergeResult(
            buffer=tuple(current),
            update_at=previous_update_at,
            mode=MergeMode.UNCHANGED,
        )

    if is_incremental(current, previous_update_at, now, settings.realtime_window_ms):
        tail = list(incoming[len(current):])
        added = normalize_batch(tail, now, settings)
        buffer = _finalize([*current, *added], settings)
        logger.debug(
            "Incremental merge: %d new of %d delivered, buffer now %d",
            len(added), len(incoming), len(buffer),
        )
        return MergeResult(buffer=buffer, update_at=now, mode=MergeMode.INCREMENTAL)

    buffer = _finalize(normalize_batch(list(incoming), now, settings), settings)
    logger.debug("Full replace: %d delivered, buffer now %d", len(incoming), len(buffer))
    return MergeResult(buffer=buffer, update_at=now, mode=MergeMode.FULL)


class LiveSeries:
    """Owner of the rendered series.

    Callers feed deliveries through :meth:`apply` with their own clock
    reading; nothing here schedules work. Readers only ever see complete
    buffers via :meth:`snapshot`.
    """

    def __init__(self, settings: Optional[ChartSettings] = None):
        """Initialize an empty series.

        Args:
            settings: Chart settings (defaults if omitted).
        """
        self.settings = settings or ChartSettings()
        self._state: tuple[tuple[Candle, ...], Optional[int]] = ((), None)

    @property
    def last_update_at(self) -> Optional[int]:
        return self._state[1]

    def snapshot(self) -> tuple[Candle, ...]:
        """Return the current buffer."""
        return self._state[0]

    def apply(self, incoming: Any, now: int) -> MergeResult:
        """Merge a delivery and make the result the current series.

        Args:
            incoming: Raw records of the delivery.
            now: Current time in epoch milliseconds.

        Returns:
            The MergeResult that was applied.
        """
        buffer, last_update_at = self._state
        result = merge(buffer, incoming, last_update_at, now, self.settings)
        self._state = (result.buffer, result.update_at)
        return result

    def is_live(self, now: int) -> bool:
        """True while the last delivery is within the real-time window."""
        last_update_at = self.last_update_at
        if last_update_at is None:
            return False
        return now - last_update_at < self.settings.realtime_window_ms

    def reset(self) -> None:
        """Drop the buffer, forcing the next delivery to replace it."""
        self._state = ((), None)

    def __len__(self) -> int:
        return len(self._state[0])
