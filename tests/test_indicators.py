"""
指標庫單元測試（序列層）

確保 SMA / 樣本標準差 / 布林帶計算正確，圖表上的線才可信。
"""
import pandas as pd
import numpy as np
import pytest

# ── 測試數據 ──────────────────────────────────────────

def _make_ohlcv(n: int = 100, seed: int = 42) -> pd.DataFrame:
    """生成模擬 OHLCV 數據"""
    rng = np.random.default_rng(seed)
    close = 100 + np.cumsum(rng.standard_normal(n) * 0.5)
    close = np.maximum(close, 10)  # 避免負數
    high = close + rng.uniform(0.5, 2.0, n)
    low = close - rng.uniform(0.5, 2.0, n)
    open_ = close + rng.uniform(-1.0, 1.0, n)
    volume = rng.uniform(100, 10000, n)

    idx = pd.date_range("2024-01-01", periods=n, freq="h", tz="UTC")
    return pd.DataFrame({
        "open": open_, "high": high, "low": low,
        "close": close, "volume": volume,
    }, index=idx)


@pytest.fixture
def df():
    return _make_ohlcv()


@pytest.fixture
def close(df):
    return df["close"]


# ── SMA ──────────────────────────────────────────────

class TestMovingAverage:
    def test_sma_known_value(self):
        from bollview.indicators import calculate_sma
        close = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0])
        sma = calculate_sma(close, length=3)
        assert abs(sma.iloc[-1] - 4.0) < 1e-10  # (3+4+5)/3 = 4

    def test_sma_warmup_is_nan(self):
        from bollview.indicators import calculate_sma
        close = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0])
        sma = calculate_sma(close, length=3)
        assert sma.iloc[:2].isna().all()
        assert sma.iloc[2:].tolist() == [2.0, 3.0, 4.0]

    def test_sma_length(self, close):
        from bollview.indicators import calculate_sma
        sma = calculate_sma(close, length=20)
        assert len(sma) == len(close)
        assert sma.index.equals(close.index)

    def test_sma_matches_pandas_rolling(self, close):
        """累積和版本應與 pandas rolling mean 一致"""
        from bollview.indicators import calculate_sma
        sma = calculate_sma(close, length=20)
        expected = close.rolling(window=20).mean()
        np.testing.assert_allclose(sma.dropna(), expected.dropna(), rtol=1e-9)
        assert sma.isna().sum() == 19

    def test_sma_window_longer_than_data(self):
        from bollview.indicators import calculate_sma
        sma = calculate_sma(pd.Series([1.0, 2.0]), length=5)
        assert sma.isna().all()
        assert len(sma) == 2

    def test_nan_contaminates_running_sum(self):
        """NaN 進入累積和後，之後所有值都是 NaN"""
        from bollview.indicators import calculate_sma
        close = pd.Series([1.0, 2.0, np.nan, 4.0, 5.0, 6.0, 7.0])
        sma = calculate_sma(close, length=2)
        assert sma.iloc[1] == 1.5
        assert sma.iloc[2:].isna().all()


# ── 樣本標準差 ────────────────────────────────────────

class TestRollingStd:
    def test_sample_std_known_value(self):
        from bollview.indicators import calculate_rolling_std
        close = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0])
        std = calculate_rolling_std(close, length=3)
        assert std.iloc[:2].isna().all()
        np.testing.assert_allclose(std.iloc[2:], [1.0, 1.0, 1.0])

    def test_matches_pandas_ddof_1(self, close):
        from bollview.indicators import calculate_rolling_std
        std = calculate_rolling_std(close, length=20)
        expected = close.rolling(window=20).std(ddof=1)
        np.testing.assert_allclose(std.dropna(), expected.dropna(), rtol=1e-7)

    def test_single_value_window_is_zero(self, close):
        """窗口只有 1 個值 → 標準差為 0（不是 NaN）"""
        from bollview.indicators import calculate_rolling_std
        std = calculate_rolling_std(close, length=1)
        assert (std == 0.0).all()

    def test_nan_only_affects_its_windows(self):
        from bollview.indicators import calculate_rolling_std
        close = pd.Series([1.0, 2.0, np.nan, 4.0, 5.0, 6.0])
        std = calculate_rolling_std(close, length=2)
        assert std.iloc[2:4].isna().all()
        assert std.iloc[4] == pytest.approx(np.sqrt(0.5))


# ── Bollinger Bands ───────────────────────────────────

class TestBollinger:
    def test_band_order(self, close):
        from bollview.indicators import calculate_bollinger_bands
        bb = calculate_bollinger_bands(close, length=20)
        valid = bb.dropna()
        assert (valid["upper"] >= valid["basis"]).all()
        assert (valid["basis"] >= valid["lower"]).all()

    def test_columns(self, close):
        from bollview.indicators import calculate_bollinger_bands
        bb = calculate_bollinger_bands(close, length=20)
        for col in ("basis", "upper", "lower", "%b", "bandwidth"):
            assert col in bb.columns

    def test_symmetric_around_basis(self, close):
        from bollview.indicators import calculate_bollinger_bands
        bb = calculate_bollinger_bands(close, length=20, std_mult=2.0).dropna()
        np.testing.assert_allclose(
            bb["upper"] - bb["basis"], bb["basis"] - bb["lower"], atol=1e-9
        )

    def test_zero_multiplier_collapses(self, close):
        from bollview.indicators import calculate_bollinger_bands
        bb = calculate_bollinger_bands(close, length=20, std_mult=0.0).dropna(
            subset=["basis"]
        )
        assert (bb["upper"] == bb["basis"]).all()
        assert (bb["lower"] == bb["basis"]).all()

    def test_percent_b_range_at_bands(self):
        """%b：收盤在下軌 = 0，在上軌 = 1"""
        from bollview.indicators import calculate_bollinger_bands
        close = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0])
        bb = calculate_bollinger_bands(close, length=3, std_mult=2.0)
        # index 2: basis=2, upper=4, lower=0, close=3 → %b = 0.75
        assert bb["%b"].iloc[2] == pytest.approx(0.75)
        assert bb["bandwidth"].iloc[2] == pytest.approx(2.0)
