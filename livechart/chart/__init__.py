"""Chart engine: normalization, merging, domain, coordinates and scenes."""

from livechart.chart.buffer import LiveSeries, MergeMode, MergeResult, merge
from livechart.chart.coords import SlotLayout, map_candle, price_to_y
from livechart.chart.domain import calculate_domain, calculate_padding
from livechart.chart.normalizer import normalize_batch, normalize_candle
from livechart.chart.render import SCENE_BUILDERS, build_scene, build_volume_scene

__all__ = [
    "LiveSeries",
    "MergeMode",
    "MergeResult",
    "SCENE_BUILDERS",
    "SlotLayout",
    "build_scene",
    "build_volume_scene",
    "calculate_domain",
    "calculate_padding",
    "map_candle",
    "merge",
    "normalize_batch",
    "normalize_candle",
    "price_to_y",
]
