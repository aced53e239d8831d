"""Candle (OHLCV) data model."""

import math
from typing import Optional

from pydantic import BaseModel, Field


class Candle(BaseModel):
    """Represents a single normalized OHLCV candle.

    Prices may be NaN when the upstream field could not be parsed; such a
    candle is kept in the series but flagged by ``is_valid`` so domain and
    geometry calculations can skip it.
    """

    time: int = Field(..., description="Candle time in epoch milliseconds")
    open: float = Field(..., description="Opening price")
    high: float = Field(..., description="High price")
    low: float = Field(..., description="Low price")
    close: float = Field(..., description="Closing price")
    volume: Optional[float] = Field(
        default=None, ge=0, description="Traded volume (None when unknown)"
    )

    model_config = {"frozen": True}

    @property
    def is_valid(self) -> bool:
        """True when all four prices are finite numbers."""
        return all(math.isfinite(p) for p in (self.open, self.high, self.low, self.close))

    @property
    def is_consistent(self) -> bool:
        """True when high and low actually bound open and close."""
        if not self.is_valid:
            return False
        return (
            self.high >= max(self.open, self.close, self.low)
            and self.low <= min(self.open, self.close, self.high)
        )

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def body_top(self) -> float:
        return max(self.open, self.close)

    @property
    def body_bottom(self) -> float:
        return min(self.open, self.close)
