"""Tests for render dispatch, volume pane and axes.

**Feature: live-chart**
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from livechart.chart.buffer import LiveSeries
from livechart.chart.render import (
    SCENE_BUILDERS,
    build_grid,
    build_scene,
    build_volume_scene,
    format_time,
)
from livechart.config import ChartSettings
from livechart.models import STYLE_LABELS, Candle, ChartStyle, ScenePrimitive

HOUR_MS = 60 * 60 * 1000


def make_candles(count: int, base: float = 1.1000) -> list[Candle]:
    """Build a gently rising series of valid candles."""
    candles = []
    for i in range(count):
        open_ = base + i * 0.0001
        close = open_ + (0.0002 if i % 2 == 0 else -0.0001)
        candles.append(Candle(
            time=i * HOUR_MS,
            open=open_,
            high=max(open_, close) + 0.0003,
            low=min(open_, close) - 0.0003,
            close=close,
            volume=100.0 + i,
        ))
    return candles


class TestDispatchTable:
    """
    **Feature: live-chart, Property 8: Exhaustive Style Dispatch**

    Every chart style has a scene builder and a display label.
    """

    def test_every_style_has_a_builder(self):
        assert set(SCENE_BUILDERS) == set(ChartStyle)

    def test_every_style_has_a_label(self):
        assert set(STYLE_LABELS) == set(ChartStyle)

    @pytest.mark.parametrize(
        "style, primitive",
        [
            (ChartStyle.LINE, ScenePrimitive.POLYLINE),
            (ChartStyle.AREA, ScenePrimitive.AREA),
            (ChartStyle.BAR, ScenePrimitive.COLUMNS),
            (ChartStyle.OHLC, ScenePrimitive.OHLC),
            (ChartStyle.CANDLESTICK, ScenePrimitive.CANDLES),
            (ChartStyle.HEIKIN_ASHI, ScenePrimitive.AREA),
        ],
    )
    def test_style_primitives(self, style, primitive):
        scene = build_scene(style, make_candles(10))
        assert scene.primitive == primitive

    def test_style_accepts_string_value(self):
        scene = build_scene("heikin-ashi", make_candles(3))
        assert scene.style == ChartStyle.HEIKIN_ASHI
        assert scene.label == "Heikin Ashi"

    def test_unknown_style_is_rejected(self):
        with pytest.raises(ValueError):
            build_scene("renko", make_candles(3))


class TestStyleSwitching:
    """Switching styles reuses the same snapshot and geometry."""

    @given(count=st.integers(min_value=1, max_value=100))
    @settings(max_examples=30, deadline=None)
    def test_geometry_is_shared_across_styles(self, count: int):
        candles = make_candles(count)
        scenes = [build_scene(style, candles) for style in ChartStyle]

        for scene in scenes[1:]:
            assert scene.domain == scenes[0].domain
            assert scene.candles == scenes[0].candles

    def test_line_follows_closes(self):
        scene = build_scene(ChartStyle.LINE, make_candles(5))

        assert [p.x for p in scene.line] == [g.center_x for g in scene.candles]
        assert [p.y for p in scene.line] == [g.close_y for g in scene.candles]
        assert scene.baseline_y is None

    def test_area_fills_to_bottom(self):
        scene = build_scene(ChartStyle.AREA, make_candles(5), 800, 400)
        assert scene.baseline_y == 400

    def test_series_is_not_copied(self):
        series = LiveSeries()
        series.apply([{"open": 1, "high": 2, "low": 0.5, "close": 1.5, "time": 0}], 0)
        snapshot = series.snapshot()

        build_scene(ChartStyle.CANDLESTICK, snapshot)
        build_scene(ChartStyle.LINE, snapshot)

        assert series.snapshot() is snapshot


class TestSceneContents:
    """Scene geometry, labels and grid."""

    def test_default_viewport(self):
        scene = build_scene(ChartStyle.CANDLESTICK, make_candles(4))

        assert scene.width == 800
        assert scene.height == 400
        assert scene.count == 4

    def test_invalid_candle_leaves_gap(self):
        candles = make_candles(3)
        candles[1] = Candle(time=HOUR_MS, open=1.1, high=1.2, low=1.0, close=float("nan"))

        scene = build_scene(ChartStyle.CANDLESTICK, candles)

        assert [g.index for g in scene.candles] == [0, 2]
        assert scene.count == 3
        assert scene.candle_at(400) is None

    def test_empty_buffer_is_no_data(self):
        scene = build_scene(ChartStyle.LINE, [])

        assert scene.is_empty
        assert scene.domain is None
        assert scene.candles == ()
        assert scene.price_labels == ()

    def test_price_labels(self):
        scene = build_scene(ChartStyle.LINE, make_candles(5), 800, 400)
        domain = scene.domain

        assert [label.position for label in scene.price_labels] == [0.0, 200.0, 400.0]
        assert scene.price_labels[0].text == f"{domain.max:.4f}"
        assert scene.price_labels[2].text == f"{domain.min:.4f}"

    def test_time_labels_every_fifth(self):
        scene = build_scene(ChartStyle.LINE, make_candles(12))

        # ceil(12 / 5) = 3 -> candles 0, 3, 6, 9
        assert [label.text for label in scene.time_labels] == ["00:00", "03:00", "06:00", "09:00"]

    def test_time_outside_calendar_gets_empty_label(self):
        series = LiveSeries()
        series.apply([{"open": 1, "high": 2, "low": 0.5, "close": 1.5, "time": 1e20}], 0)

        scene = build_scene(ChartStyle.LINE, series.snapshot())

        assert len(scene.candles) == 1
        assert [label.text for label in scene.time_labels] == [""]

    def test_format_time(self):
        assert format_time(90 * 60 * 1000) == "01:30"
        assert format_time(10**20) == ""
        assert format_time(-(10**20)) == ""

    def test_explicit_zero_size_is_rejected(self):
        with pytest.raises(ValidationError):
            build_scene(ChartStyle.LINE, make_candles(3), 0, 400)
        with pytest.raises(ValidationError):
            build_volume_scene(make_candles(3), 800, 0)

    def test_grid_borders(self):
        grid = build_grid(800, 400)
        horizontal = [g for g in grid if g.orientation == "horizontal"]
        vertical = [g for g in grid if g.orientation == "vertical"]

        assert len(horizontal) == 6
        assert len(vertical) == 5
        assert [g.is_border for g in vertical] == [True, False, False, False, True]
        assert horizontal[-1].position == 400

    def test_micro_flag(self):
        flat = [Candle(time=i, open=1.2345, high=1.2345, low=1.2345, close=1.2345) for i in range(3)]
        wide = [Candle(time=0, open=100.0, high=110.0, low=90.0, close=105.0)]

        assert build_scene(ChartStyle.LINE, flat).is_micro
        assert not build_scene(ChartStyle.LINE, wide).is_micro

    def test_body_width_from_settings(self):
        config = ChartSettings(body_width_fraction=0.5)

        scene = build_scene(ChartStyle.CANDLESTICK, make_candles(4), settings=config)

        assert scene.candles[0].candle_width == pytest.approx(100.0)

    def test_json_round_trip(self):
        scene = build_scene(ChartStyle.OHLC, make_candles(3))
        payload = scene.model_dump(mode="json")

        assert payload["style"] == "ohlc"
        assert len(payload["candles"]) == 3


class TestHoverCorrelation:
    """
    **Feature: live-chart, Property 9: Hover Matches Drawn Geometry**

    *For any* series, the candle resolved under a body's center is that body.
    """

    @given(count=st.integers(min_value=1, max_value=100), data=st.data())
    @settings(max_examples=50, deadline=None)
    def test_hover_hits_drawn_candle(self, count, data):
        scene = build_scene(ChartStyle.CANDLESTICK, make_candles(count))
        index = data.draw(st.integers(min_value=0, max_value=count - 1))
        geometry = scene.candles[index]

        assert scene.candle_at(geometry.center_x) == geometry
        assert scene.candle_at(geometry.x + 1e-6) == geometry

    def test_outside_surface(self):
        scene = build_scene(ChartStyle.CANDLESTICK, make_candles(3))

        assert scene.candle_at(-5) is None
        assert scene.candle_at(801) is None

    def test_empty_scene(self):
        assert build_scene(ChartStyle.LINE, []).candle_at(10) is None


class TestVolumeScene:
    """Volume pane shares the slot partition of the price pane."""

    def test_default_viewport(self):
        volume = build_volume_scene(make_candles(4))

        assert volume.width == 800
        assert volume.height == 200
        assert volume.max_volume == 103.0

    def test_tallest_bar_reaches_top(self):
        volume = build_volume_scene(make_candles(4))

        assert volume.bars[-1].top_y == pytest.approx(0.0)
        assert all(0 <= bar.top_y <= 200 for bar in volume.bars)

    def test_unknown_volume_leaves_gap(self):
        candles = make_candles(3)
        candles[1] = candles[1].model_copy(update={"volume": None})

        volume = build_volume_scene(candles)

        assert [bar.index for bar in volume.bars] == [0, 2]

    def test_all_unknown_is_empty(self):
        candles = [c.model_copy(update={"volume": None}) for c in make_candles(3)]
        assert build_volume_scene(candles).is_empty

    def test_all_zero_volume_sits_on_floor(self):
        candles = [c.model_copy(update={"volume": 0.0}) for c in make_candles(3)]

        volume = build_volume_scene(candles)

        assert all(bar.top_y == 200 for bar in volume.bars)

    def test_bars_align_with_price_pane(self):
        candles = make_candles(6)

        price = build_scene(ChartStyle.CANDLESTICK, candles)
        volume = build_volume_scene(candles)

        assert [b.x for b in volume.bars] == [g.x for g in price.candles]
