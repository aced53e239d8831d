"""Price domain calculation with scale-aware padding."""

import logging
import math
from collections.abc import Iterable
from typing import Optional

from livechart.models import Candle, PriceDomain

logger = logging.getLogger(__name__)

# Padding tiers, keyed on the raw high-low range of the window
MICRO_TIER_LIMIT = 0.001
SMALL_TIER_LIMIT = 0.01
MICRO_PADDING_FLOOR = 0.0005


def calculate_padding(price_range: float) -> float:
    """Calculate the vertical padding for a raw price range.

    Tight ranges get proportionally more room so sub-pip movements stay
    visible instead of collapsing to a flat line.

    Args:
        price_range: Raw extent (highest minus lowest price) of the window.

    Returns:
        Padding added below the minimum and above the maximum.
    """
    if price_range < MICRO_TIER_LIMIT:
        return max(price_range * 2, MICRO_PADDING_FLOOR)
    if price_range < SMALL_TIER_LIMIT:
        return price_range * 0.5
    return price_range * 0.1


def calculate_domain(candles: Iterable[Candle]) -> Optional[PriceDomain]:
    """Derive the padded price domain of a window of candles.

    Candles with malformed prices are left out of the reduction. All four
    prices of each candle are reduced, so a candle whose high is below its
    low still fits inside the domain.

    Args:
        candles: The window to scale.

    Returns:
        PriceDomain, or None if there is no valid candle to scale to or the
        padded extent overflows.
    """
    valid = [c for c in candles if c.is_valid]
    if not valid:
        return None

    raw_min = min(min(c.open, c.high, c.low, c.close) for c in valid)
    raw_max = max(max(c.open, c.high, c.low, c.close) for c in valid)
    padding = calculate_padding(raw_max - raw_min)
    low, high = raw_min - padding, raw_max + padding

    if not math.isfinite(high - low):
        logger.warning("Price extent %s..%s overflows, nothing to scale to", raw_min, raw_max)
        return None

    return PriceDomain(
        min=low,
        max=high,
        raw_min=raw_min,
        raw_max=raw_max,
    )
