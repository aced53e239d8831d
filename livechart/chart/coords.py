"""Price-to-pixel coordinate mapping.

Y grows downward, as on SVG and canvas surfaces. The horizontal axis is an
equal-width partition of the surface by candle index.
"""

import math
from typing import Optional

from livechart.models import Candle, CandleGeometry, PriceDomain


def price_to_y(price: float, domain: PriceDomain, height: float) -> float:
    """Map a price to a vertical pixel offset.

    Args:
        price: Price to map.
        domain: Price domain of the pane.
        height: Pane height in pixels.

    Returns:
        Y offset from the top; mid-pane if the domain has no usable span.

    Raises:
        ValueError: If price is NaN or infinite.
    """
    if not math.isfinite(price):
        raise ValueError(f"Cannot map non-finite price {price}")

    span = domain.max - domain.min
    if span == 0 or not math.isfinite(span):
        return height / 2
    return ((domain.max - price) / span) * height


class SlotLayout:
    """Equal-width horizontal partition of a pane, one slot per candle."""

    def __init__(self, width: float, count: int, body_width_fraction: float = 0.7):
        self.width = width
        self.count = count
        self.body_width_fraction = body_width_fraction

    @property
    def slot_width(self) -> float:
        if self.count <= 0:
            return 0.0
        return self.width / self.count

    @property
    def candle_width(self) -> float:
        return self.slot_width * self.body_width_fraction

    def x(self, index: int) -> float:
        """Left edge of the body in slot `index`, centered in its slot."""
        slot = self.slot_width
        return index * slot + slot * (1 - self.body_width_fraction) / 2

    def center_x(self, index: int) -> float:
        return self.x(index) + self.candle_width / 2

    def index_at(self, offset: float) -> Optional[int]:
        """Resolve the slot under a horizontal pixel offset.

        Returns:
            The slot index, or None outside the pane or when it is empty.
        """
        if self.count <= 0 or not 0 <= offset <= self.width:
            return None
        return min(int(offset // self.slot_width), self.count - 1)


def map_candle(
    candle: Candle,
    index: int,
    layout: SlotLayout,
    domain: PriceDomain,
    height: float,
    min_body_height: float = 4.0,
) -> Optional[CandleGeometry]:
    """Compute the draw instruction for one candle.

    Returns None for candles with malformed prices, leaving a gap at their slot.
    """
    if not candle.is_valid:
        return None

    open_y = price_to_y(candle.open, domain, height)
    close_y = price_to_y(candle.close, domain, height)
    body_top_y = min(open_y, close_y)
    # Keep doji candles visible
    body_height = max(min_body_height, max(open_y, close_y) - body_top_y)

    return CandleGeometry(
        index=index,
        time=candle.time,
        x=layout.x(index),
        center_x=layout.center_x(index),
        candle_width=layout.candle_width,
        high_y=price_to_y(candle.high, domain, height),
        low_y=price_to_y(candle.low, domain, height),
        open_y=open_y,
        close_y=close_y,
        body_top_y=body_top_y,
        body_bottom_y=body_top_y + body_height,
        is_bullish=candle.is_bullish,
    )
