"""Scene description models handed to the rendering surface."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from livechart.models.domain import PriceDomain


class ChartStyle(str, Enum):
    """Supported chart styles."""

    LINE = "line"
    AREA = "area"
    BAR = "bar"
    OHLC = "ohlc"
    CANDLESTICK = "candlestick"
    HEIKIN_ASHI = "heikin-ashi"


class ScenePrimitive(str, Enum):
    """Drawing primitive a renderer should use for a scene."""

    POLYLINE = "polyline"
    AREA = "area"
    COLUMNS = "columns"
    OHLC = "ohlc"
    CANDLES = "candles"


STYLE_LABELS: dict[ChartStyle, str] = {
    ChartStyle.LINE: "Line Chart",
    ChartStyle.AREA: "Area Chart",
    ChartStyle.BAR: "Bar Chart",
    ChartStyle.CANDLESTICK: "Candlestick",
    ChartStyle.OHLC: "OHLC Bars",
    ChartStyle.HEIKIN_ASHI: "Heikin Ashi",
}


class CandleGeometry(BaseModel):
    """Pixel-space draw instruction for one candle."""

    index: int = Field(..., ge=0, description="Slot index in the series")
    time: int = Field(..., description="Candle time in epoch milliseconds")
    x: float = Field(..., description="Left edge of the candle body")
    center_x: float = Field(..., description="Horizontal center (wick position)")
    candle_width: float = Field(..., ge=0, description="Body width")
    high_y: float
    low_y: float
    open_y: float
    close_y: float
    body_top_y: float
    body_bottom_y: float
    is_bullish: bool

    model_config = {"frozen": True}


class PricePoint(BaseModel):
    """A vertex of a line or area path."""

    x: float
    y: float

    model_config = {"frozen": True}


class AxisLabel(BaseModel):
    """A positioned axis label."""

    position: float = Field(..., description="Pixel offset along the axis")
    text: str

    model_config = {"frozen": True}


class GridLine(BaseModel):
    """A background grid line, given as a ratio of the surface size."""

    orientation: str = Field(..., description="'horizontal' or 'vertical'")
    ratio: float = Field(..., ge=0, le=1)
    position: float = Field(..., description="Pixel offset of the line")
    is_border: bool = False

    model_config = {"frozen": True}


class Scene(BaseModel):
    """Renderable description of a price pane."""

    style: ChartStyle
    primitive: ScenePrimitive
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    count: int = Field(default=0, ge=0, description="Slots in the partition")
    body_width_fraction: float = Field(default=0.7, gt=0, le=1)
    domain: Optional[PriceDomain] = None
    candles: tuple[CandleGeometry, ...] = ()
    line: tuple[PricePoint, ...] = ()
    baseline_y: Optional[float] = None
    price_labels: tuple[AxisLabel, ...] = ()
    time_labels: tuple[AxisLabel, ...] = ()
    grid: tuple[GridLine, ...] = ()

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to draw (render a "no data" state)."""
        return self.domain is None or not self.candles

    @property
    def is_micro(self) -> bool:
        return self.domain is not None and self.domain.is_micro

    @property
    def label(self) -> str:
        return STYLE_LABELS[self.style]

    def candle_at(self, offset_x: float) -> Optional[CandleGeometry]:
        """Resolve the candle under a pointer offset.

        Uses the same slot partition as the geometry, so hover highlighting
        lines up with what was drawn. Returns None over a gap or outside
        the surface.
        """
        from livechart.chart.coords import SlotLayout

        layout = SlotLayout(self.width, self.count, self.body_width_fraction)
        index = layout.index_at(offset_x)
        if index is None:
            return None
        for geometry in self.candles:
            if geometry.index == index:
                return geometry
        return None


class VolumeBar(BaseModel):
    """A single column of the volume pane."""

    index: int = Field(..., ge=0)
    time: int
    x: float
    bar_width: float = Field(..., ge=0)
    top_y: float
    volume: float = Field(..., ge=0)
    is_bullish: bool

    model_config = {"frozen": True}


class VolumeScene(BaseModel):
    """Renderable description of the volume pane."""

    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    max_volume: Optional[float] = None
    bars: tuple[VolumeBar, ...] = ()

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not self.bars
