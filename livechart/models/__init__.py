"""Data models for livechart."""

from livechart.models.candle import Candle
from livechart.models.domain import PriceDomain
from livechart.models.scene import (
    STYLE_LABELS,
    AxisLabel,
    CandleGeometry,
    ChartStyle,
    GridLine,
    PricePoint,
    Scene,
    ScenePrimitive,
    VolumeBar,
    VolumeScene,
)

__all__ = [
    "AxisLabel",
    "Candle",
    "CandleGeometry",
    "ChartStyle",
    "GridLine",
    "PriceDomain",
    "PricePoint",
    "STYLE_LABELS",
    "Scene",
    "ScenePrimitive",
    "VolumeBar",
    "VolumeScene",
]
