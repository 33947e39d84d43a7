import unittest
from datetime import date
from unittest.mock import patch

import numpy as np

from core.exceptions import DataError, InsufficientDataError
from data.interfaces import PricePoint, PriceSeries
from indicators import analyze_series, compute_ema_trend, compute_sma, daily_returns
from tests.helpers import make_series

class TestSMA(unittest.TestCase):

    def test_identical_closes(self):
        series = make_series("FLAT", [42.5] * 250)
        self.assertAlmostEqual(compute_sma(series, 200), 42.5)

    def test_increasing_closes_between_window_bounds(self):
        closes = list(range(1, 251))
        series = make_series("UP", closes)
        sma = compute_sma(series, 200)
        # Window = newest 200 closes: 51..250
        self.assertGreater(sma, 51)
        self.assertLess(sma, 250)
        self.assertAlmostEqual(sma, (51 + 250) / 2)

    def test_uses_newest_window_regardless_of_input_order(self):
        series = make_series("UP", list(range(1, 11)))
        reversed_series = PriceSeries(ticker="UP", points=tuple(reversed(series.points)))
        self.assertAlmostEqual(compute_sma(series, 3), 9.0)
        self.assertAlmostEqual(compute_sma(reversed_series, 3), 9.0)

    def test_insufficient_data(self):
        series = make_series("SHORT", [10.0] * 199)
        with self.assertRaises(InsufficientDataError) as ctx:
            compute_sma(series, 200)
        self.assertEqual(ctx.exception.required, 200)
        self.assertEqual(ctx.exception.available, 199)

    def test_invalid_period(self):
        with self.assertRaises(ValueError):
            compute_sma(make_series("X", [1.0, 2.0]), 0)

class TestEMATrend(unittest.TestCase):

    def test_flat_series_is_zero(self):
        series = make_series("FLAT", [100.0] * 150)
        self.assertEqual(compute_ema_trend(series, 112), 0.0)

    def test_single_point_period_one(self):
        series = make_series("ONE", [10.0])
        self.assertEqual(compute_ema_trend(series, 1), 0.0)

    def test_insufficient_data(self):
        with self.assertRaises(InsufficientDataError):
            compute_ema_trend(make_series("SHORT", [10.0] * 50), 112)

    def test_uptrend_positive_downtrend_negative(self):
        up = make_series("UP", [100 * (1.01 ** i) for i in range(150)])
        down = make_series("DOWN", [100 * (0.99 ** i) for i in range(150)])
        self.assertGreater(compute_ema_trend(up, 112), 0)
        self.assertLess(compute_ema_trend(down, 112), 0)

    def test_input_order_does_not_matter(self):
        closes = [100, 101, 99, 102, 104, 103, 107, 106, 108, 110]
        series = make_series("MIX", closes)
        reversed_series = PriceSeries(ticker="MIX", points=tuple(reversed(series.points)))
        self.assertAlmostEqual(compute_ema_trend(series, 5), compute_ema_trend(reversed_series, 5))

    def test_two_point_value(self):
        # One return r: sigma^2 = r^2, phi = sqrt(eta) * r / |r|
        series = make_series("TWO", [100.0, 110.0])
        self.assertAlmostEqual(compute_ema_trend(series, 2), (0.5 ** 0.5))

    def test_known_value_irregular_series(self):
        # Returns newest first: 0.1, -0.2, 0.05; eta = 1/4
        # Variance warm-up over all returns: 0.01 -> 0.0175 -> 0.01375
        # phi = 0.5 * 0.1 / sqrt(0.01375)                      =  0.4264014
        # phi = 0.75 * phi + 0.5 * (-0.2 / sqrt(0.01375))      = -0.5330018  (var -> 0.0203125)
        # phi = 0.75 * phi + 0.5 * (0.05 / sqrt(0.0203125))    = -0.2243397
        series = make_series("IRR", [100.0, 105.0, 84.0, 92.4])
        self.assertAlmostEqual(compute_ema_trend(series, 4), -0.2243397, places=5)

    def test_non_finite_return_rejected(self):
        series = make_series("BAD", [10.0] * 150)
        returns = np.full(149, 0.01)
        returns[70] = np.inf
        with patch("indicators.ema_trend.daily_returns", return_value=returns):
            with self.assertRaises(DataError):
                compute_ema_trend(series, 112)

    def test_daily_returns_newest_first(self):
        series = make_series("R", [100.0, 110.0, 99.0])
        returns = daily_returns(series)
        self.assertEqual(len(returns), 2)
        self.assertAlmostEqual(returns[0], -0.1)
        self.assertAlmostEqual(returns[1], 0.1)

class TestAnalyzeSeries(unittest.TestCase):

    def test_partial_when_history_short_for_sma(self):
        series = make_series("MID", [50.0 + (i % 3) for i in range(150)])
        snapshot = analyze_series(series, sma_period=200, ema_period=112)
        self.assertIsNone(snapshot.sma)
        self.assertIsNotNone(snapshot.ema_trend)
        self.assertFalse(snapshot.complete)
        self.assertEqual(snapshot.current_price, series.latest_close)

    def test_unusable_ema_left_empty(self):
        series = make_series("BAD", [10.0 + (i % 3) for i in range(250)])
        returns = np.full(249, 0.01)
        returns[70] = np.nan
        with patch("indicators.ema_trend.daily_returns", return_value=returns):
            snapshot = analyze_series(series)
        self.assertIsNone(snapshot.ema_trend)
        self.assertIsNotNone(snapshot.sma)

    def test_complete(self):
        snapshot = analyze_series(make_series("FULL", [20.0] * 250))
        self.assertTrue(snapshot.complete)
        self.assertAlmostEqual(snapshot.sma, 20.0)
        self.assertEqual(snapshot.ema_trend, 0.0)

class TestPriceSeries(unittest.TestCase):

    def test_duplicate_dates_rejected(self):
        d = date(2024, 1, 2)
        with self.assertRaises(ValueError):
            PriceSeries("DUP", (PricePoint(d, 1.0), PricePoint(d, 2.0)))

    def test_non_positive_close_rejected(self):
        closes = [100.0 + i for i in range(150)]
        closes[70] = 0.0
        with self.assertRaises(ValueError):
            make_series("ZERO", closes)
        for bad in (-1.0, float("nan"), float("inf")):
            with self.subTest(close=bad):
                with self.assertRaises(ValueError):
                    PricePoint(date(2024, 1, 2), bad)

    def test_from_records_rejects_zero_close(self):
        with self.assertRaises(ValueError):
            PriceSeries.from_records("ZERO", [{"date": "2024-01-02", "close": 0}])

    def test_views(self):
        series = make_series("V", [1.0, 2.0, 3.0])
        self.assertEqual([p.close for p in series.newest_first()], [3.0, 2.0, 1.0])
        self.assertEqual([p.close for p in series.oldest_first()], [1.0, 2.0, 3.0])
        self.assertEqual(series.latest_close, 3.0)

if __name__ == '__main__':
    unittest.main()
