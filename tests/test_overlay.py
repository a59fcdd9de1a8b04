"""
布林帶疊加層測試

- 參數 / K 線變更 → 整段重算；樣式變更不重算
- offset 套用在輸出序列
- lines / band_polygon 依樣式開關
- 十字游標提示文字
"""
from __future__ import annotations

import math

import pytest


T0 = 1_700_000_000_000
STEP = 60_000


def _candles(closes):
    from bollview.data import Candle
    return [
        Candle(timestamp=T0 + i * STEP, open=c, high=c, low=c, close=c)
        for i, c in enumerate(closes)
    ]


@pytest.fixture
def overlay():
    from bollview.chart import BollingerOverlay
    from bollview.indicators import BollingerInputs
    return BollingerOverlay(
        _candles([1.0, 2.0, 3.0, 4.0, 5.0]),
        inputs=BollingerInputs(length=3, std_dev_multiplier=2),
        enabled=True,
    )


class TestRecompute:
    def test_disabled_has_no_series(self):
        from bollview.chart import BollingerOverlay
        overlay = BollingerOverlay(_candles([1.0, 2.0, 3.0]))
        assert overlay.series == []
        assert overlay.lines() == {}
        overlay.enable()
        assert len(overlay.series) == 3
        overlay.disable()
        assert overlay.series == []

    def test_inputs_change_recomputes(self, overlay):
        first = overlay.result
        assert overlay.result is first  # 快取
        overlay.update_inputs(length=2)
        second = overlay.result
        assert second is not first
        assert second.series[1].basis == pytest.approx(1.5)

    def test_style_change_keeps_result(self, overlay):
        first = overlay.result
        overlay.update_style(show_background=False)
        assert overlay.result is first

    def test_candles_change_recomputes(self, overlay):
        overlay.result
        overlay.set_candles(_candles([10.0, 10.0, 10.0, 10.0]))
        assert len(overlay.result) == 4
        assert overlay.series[3].basis == pytest.approx(10.0)
        assert overlay.series[3].upper == pytest.approx(10.0)

    def test_offset_applied_to_series(self, overlay):
        overlay.update_inputs(offset=1)
        series = overlay.series
        # result 保持未平移
        assert overlay.result.series[2].basis == pytest.approx(2.0)
        assert series[2].basis is None
        assert series[3].basis == pytest.approx(2.0)
        assert series[3].timestamp == T0 + 3 * STEP

    def test_no_candles(self):
        from bollview.chart import BollingerOverlay
        overlay = BollingerOverlay(enabled=True)
        assert overlay.series == []
        assert overlay.band_polygon() == []
        assert overlay.to_frame().empty


class TestDrawables:
    def test_lines_follow_show_flags(self, overlay):
        from bollview.indicators import BandLineStyle
        lines = overlay.lines()
        assert set(lines) == {"basis", "upper", "lower"}
        assert lines["upper"][2] == (T0 + 2 * STEP, pytest.approx(4.0))
        assert lines["basis"][0] == (T0, None)

        overlay.update_style(upper=BandLineStyle(show=False))
        assert set(overlay.lines()) == {"basis", "lower"}

    def test_band_polygon(self, overlay):
        poly = overlay.band_polygon()
        n = len(overlay.series)
        assert len(poly) == 2 * n
        # 上軌依序，下軌反序
        assert [ts for ts, _ in poly[:n]] == [T0 + i * STEP for i in range(n)]
        assert [ts for ts, _ in poly[n:]] == [T0 + i * STEP for i in reversed(range(n))]
        assert poly[2][1] == pytest.approx(4.0)
        assert poly[-3][1] == pytest.approx(0.0)

    def test_band_polygon_hidden(self, overlay):
        overlay.update_style(show_background=False)
        assert overlay.band_polygon() == []

    def test_to_frame(self, overlay):
        df = overlay.to_frame()
        assert list(df.columns) == ["basis", "upper", "lower"]
        assert len(df) == 5
        assert math.isnan(df["basis"].iloc[0])
        assert df["upper"].iloc[2] == pytest.approx(4.0)


class TestTooltip:
    def test_defined_point(self, overlay):
        text = overlay.tooltip(T0 + 2 * STEP)
        assert text == "BOLL(3, 2)  Basis: 2.00  Upper: 4.00  Lower: 0.00"

    def test_warmup_point(self, overlay):
        text = overlay.tooltip(T0)
        assert text == "BOLL(3, 2)  Basis: -  Upper: -  Lower: -"

    def test_unknown_timestamp(self, overlay):
        assert overlay.tooltip(123) == ""
        assert overlay.point_at(123) is None

    def test_non_integer_multiplier(self, overlay):
        overlay.update_inputs(std_dev_multiplier=2.5)
        assert overlay.tooltip(T0 + 4 * STEP).startswith("BOLL(3, 2.5)")
