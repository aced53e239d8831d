"""Render dispatch: turn the live buffer into a scene description.

Every style is a stateless transform over the same buffer and domain, so
switching styles only means calling :func:`build_scene` again with the
snapshot already held.
"""

import logging
import math
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Optional

from livechart.chart.coords import SlotLayout, map_candle
from livechart.chart.domain import calculate_domain
from livechart.config import ChartSettings
from livechart.models import (
    AxisLabel,
    Candle,
    CandleGeometry,
    ChartStyle,
    GridLine,
    PriceDomain,
    PricePoint,
    Scene,
    ScenePrimitive,
    VolumeBar,
    VolumeScene,
)

logger = logging.getLogger(__name__)

HORIZONTAL_GRID_RATIOS = (0.0, 0.2, 0.4, 0.6, 0.8, 1.0)
VERTICAL_GRID_RATIOS = (0.0, 0.25, 0.5, 0.75, 1.0)
TIME_LABEL_COUNT = 5
PRICE_DECIMALS = 4


def build_price_labels(domain: PriceDomain, height: float) -> tuple[AxisLabel, ...]:
    """Top, middle and bottom price labels for the vertical axis."""
    mid = (domain.max + domain.min) / 2
    return tuple(
        AxisLabel(position=position, text=f"{price:.{PRICE_DECIMALS}f}")
        for price, position in ((domain.max, 0.0), (mid, height / 2), (domain.min, float(height)))
    )


def format_time(time: int) -> str:
    """Format an epoch-millisecond time as HH:MM UTC, or "" if out of range."""
    try:
        moment = datetime.fromtimestamp(time / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.debug("Time %s is outside the calendar range", time)
        return ""
    return moment.strftime("%H:%M")


def build_time_labels(
    candles: Sequence[Candle],
    layout: SlotLayout,
) -> tuple[AxisLabel, ...]:
    """Time labels for roughly five evenly spaced candles, as HH:MM UTC.

    A time outside the calendar range gets an empty label.
    """
    if not candles:
        return ()

    every = math.ceil(len(candles) / TIME_LABEL_COUNT)
    labels = []
    for index in range(0, len(candles), every):
        text = format_time(candles[index].time)
        labels.append(AxisLabel(position=layout.center_x(index), text=text))
    return tuple(labels)


def build_grid(width: float, height: float) -> tuple[GridLine, ...]:
    """Background grid; the outermost lines are borders."""
    lines = [
        GridLine(
            orientation="horizontal",
            ratio=ratio,
            position=ratio * height,
            is_border=ratio in (0.0, 1.0),
        )
        for ratio in HORIZONTAL_GRID_RATIOS
    ]
    lines.extend(
        GridLine(
            orientation="vertical",
            ratio=ratio,
            position=ratio * width,
            is_border=ratio in (0.0, 1.0),
        )
        for ratio in VERTICAL_GRID_RATIOS
    )
    return tuple(lines)


def _close_path(geometry: Sequence[CandleGeometry]) -> tuple[PricePoint, ...]:
    return tuple(PricePoint(x=g.center_x, y=g.close_y) for g in geometry)


def _line_scene(base: dict, geometry: tuple[CandleGeometry, ...]) -> Scene:
    return Scene(**base, primitive=ScenePrimitive.POLYLINE, line=_close_path(geometry))


def _area_scene(base: dict, geometry: tuple[CandleGeometry, ...]) -> Scene:
    return Scene(
        **base,
        primitive=ScenePrimitive.AREA,
        line=_close_path(geometry),
        baseline_y=base["height"],
    )


def _bar_scene(base: dict, geometry: tuple[CandleGeometry, ...]) -> Scene:
    return Scene(**base, primitive=ScenePrimitive.COLUMNS, baseline_y=base["height"])


def _ohlc_scene(base: dict, geometry: tuple[CandleGeometry, ...]) -> Scene:
    return Scene(**base, primitive=ScenePrimitive.OHLC)


def _candlestick_scene(base: dict, geometry: tuple[CandleGeometry, ...]) -> Scene:
    return Scene(**base, primitive=ScenePrimitive.CANDLES)


# Heikin-Ashi is drawn as a smoothed close area over the same buffer
_heikin_ashi_scene = _area_scene


SCENE_BUILDERS: dict[ChartStyle, Callable[[dict, tuple[CandleGeometry, ...]], Scene]] = {
    ChartStyle.LINE: _line_scene,
    ChartStyle.AREA: _area_scene,
    ChartStyle.BAR: _bar_scene,
    ChartStyle.OHLC: _ohlc_scene,
    ChartStyle.CANDLESTICK: _candlestick_scene,
    ChartStyle.HEIKIN_ASHI: _heikin_ashi_scene,
}


def build_scene(
    style: ChartStyle,
    candles: Sequence[Candle],
    width: Optional[float] = None,
    height: Optional[float] = None,
    settings: Optional[ChartSettings] = None,
) -> Scene:
    """Build the price pane scene for a style.

    Args:
        style: Chart style to render.
        candles: Snapshot of the live buffer, sorted by time.
        width: Pane width in pixels (default from settings).
        height: Pane height in pixels (default from settings).
        settings: Chart settings (defaults if omitted).

    Returns:
        Scene with geometry for every valid candle. When nothing is
        renderable the scene has no domain and no geometry.
    """
    settings = settings or ChartSettings()
    style = ChartStyle(style)
    width = settings.price_width if width is None else width
    height = settings.price_height if height is None else height

    domain = calculate_domain(candles)
    base = {
        "style": style,
        "width": width,
        "height": height,
        "body_width_fraction": settings.body_width_fraction,
    }
    if domain is None:
        return SCENE_BUILDERS[style](base, ())

    layout = SlotLayout(width, len(candles), settings.body_width_fraction)
    geometry = tuple(
        g
        for g in (
            map_candle(candle, index, layout, domain, height, settings.min_body_height)
            for index, candle in enumerate(candles)
        )
        if g is not None
    )

    base.update(
        count=len(candles),
        domain=domain,
        candles=geometry,
        price_labels=build_price_labels(domain, height),
        time_labels=build_time_labels(candles, layout),
        grid=build_grid(width, height),
    )
    return SCENE_BUILDERS[style](base, geometry)


def build_volume_scene(
    candles: Sequence[Candle],
    width: Optional[float] = None,
    height: Optional[float] = None,
    settings: Optional[ChartSettings] = None,
) -> VolumeScene:
    """Build the volume pane, using the same slots as the price pane.

    Candles with unknown volume leave a gap.
    """
    settings = settings or ChartSettings()
    width = settings.volume_width if width is None else width
    height = settings.volume_height if height is None else height

    known = [c.volume for c in candles if c.volume is not None]
    if not known:
        return VolumeScene(width=width, height=height)

    max_volume = max(known)
    layout = SlotLayout(width, len(candles), settings.body_width_fraction)
    bars = []
    for index, candle in enumerate(candles):
        if candle.volume is None:
            continue
        top_y = height - (candle.volume / max_volume) * height if max_volume > 0 else float(height)
        bars.append(VolumeBar(
            index=index,
            time=candle.time,
            x=layout.x(index),
            bar_width=layout.candle_width,
            top_y=top_y,
            volume=candle.volume,
            is_bullish=candle.is_bullish,
        ))

    return VolumeScene(width=width, height=height, max_volume=max_volume, bars=tuple(bars))

