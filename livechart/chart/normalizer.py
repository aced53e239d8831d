"""Normalization of raw OHLCV records into canonical candles.

Upstream feeds deliver candles with string-typed prices and a mix of time
encodings (ISO strings under ``timestamp`` or ``time``, epoch numbers under
``time``, or nothing at all). This module turns each of them into a
:class:`~livechart.models.Candle` without ever raising on bad numbers: a
price that cannot be parsed becomes NaN and the candle is flagged invalid.
"""

import logging
import math
import random
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from livechart.config import ChartSettings, VolumePolicy
from livechart.errors import InvalidRecordError
from livechart.models import Candle

logger = logging.getLogger(__name__)

PRICE_FIELDS = ("open", "high", "low", "close")

# Bounds of the filler used by VolumePolicy.RANDOM
RANDOM_VOLUME_MIN = 100
RANDOM_VOLUME_MAX = 1099


def parse_price(value: Any) -> float:
    """Parse a price field, returning NaN when it is not a number.

    Args:
        value: Raw field value (string, int, float or anything else).

    Returns:
        The parsed float, or NaN.
    """
    if isinstance(value, bool) or value is None:
        return float("nan")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return float("nan")
    return float("nan")


def parse_iso_time(value: str) -> Optional[int]:
    """Convert an ISO-8601 string to epoch milliseconds.

    Naive datetimes are read as UTC. Returns None if the string does not parse.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def _is_epoch_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def resolve_time(
    record: Mapping,
    index: int,
    batch_size: int,
    now: int,
    step_ms: int,
) -> int:
    """Work out a candle's time in epoch milliseconds.

    Priority: ``timestamp`` ISO string, ``time`` ISO string, ``time`` epoch
    number, then a synthesized time stepping back from ``now`` so untimed
    records still sort in batch order.

    Args:
        record: Raw record.
        index: Position of the record within its batch.
        batch_size: Number of records in the batch.
        now: Current time in epoch milliseconds.
        step_ms: Spacing between synthesized times.

    Returns:
        Epoch milliseconds.
    """
    timestamp = record.get("timestamp")
    if isinstance(timestamp, str):
        parsed = parse_iso_time(timestamp)
        if parsed is not None:
            return parsed
        logger.debug("Unparseable timestamp %r, falling back", timestamp)

    time_value = record.get("time")
    if isinstance(time_value, str):
        parsed = parse_iso_time(time_value)
        if parsed is not None:
            return parsed
        logger.debug("Unparseable time %r, falling back", time_value)
    elif _is_epoch_number(time_value):
        return int(time_value)

    return now - (batch_size - index) * step_ms


def resolve_volume(value: Any, time: int, policy: VolumePolicy) -> Optional[float]:
    """Return the record's volume, or the policy's substitute when unusable.

    The random filler is seeded from the candle time, so the same candle
    always gets the same volume.
    """
    volume = parse_price(value)
    if math.isfinite(volume) and volume >= 0:
        return volume

    if policy == VolumePolicy.ZERO:
        return 0.0
    if policy == VolumePolicy.RANDOM:
        return float(random.Random(time).randint(RANDOM_VOLUME_MIN, RANDOM_VOLUME_MAX))
    return None


def normalize_candle(
    record: Any,
    index: int,
    batch_size: int,
    now: int,
    settings: Optional[ChartSettings] = None,
) -> Candle:
    """Convert one raw record into a canonical candle.

    Args:
        record: Raw record mapping with open/high/low/close and optional
            volume, timestamp and time fields.
        index: Position of the record within its batch.
        batch_size: Number of records in the batch.
        now: Current time in epoch milliseconds.
        settings: Chart settings (defaults if omitted).

    Returns:
        The normalized Candle. Unparseable prices are NaN.

    Raises:
        InvalidRecordError: If the record is not a mapping.
    """
    if not isinstance(record, Mapping):
        raise InvalidRecordError(
            f"Expected a mapping for record {index}, got {type(record).__name__}"
        )

    settings = settings or ChartSettings()
    prices = {name: parse_price(record.get(name)) for name in PRICE_FIELDS}
    time = resolve_time(record, index, batch_size, now, settings.missing_time_step_ms)

    candle = Candle(
        time=time,
        volume=resolve_volume(record.get("volume"), time, settings.volume_policy),
        **prices,
    )

    if not candle.is_valid:
        logger.warning("Record %d at %d has malformed prices: %s", index, time, prices)
    elif not candle.is_consistent:
        logger.warning("Record %d at %d has high/low outside open/close", index, time)

    return candle


def normalize_batch(
    records: list,
    now: int,
    settings: Optional[ChartSettings] = None,
) -> list[Candle]:
    """Normalize a batch of raw records, skipping ones that are not mappings.

    Args:
        records: Raw records in delivery order.
        now: Current time in epoch milliseconds.
        settings: Chart settings (defaults if omitted).

    Returns:
        Normalized candles in the same order as the input.
    """
    candles = []
    batch_size = len(records)

    for index, record in enumerate(records):
        try:
            candles.append(normalize_candle(record, index, batch_size, now, settings))
        except InvalidRecordError as e:
            logger.warning("Skipping record: %s", e)

    return candles
