"""
Indicators computed from daily close histories.
"""
from .moving_average import compute_sma
from .ema_trend import compute_ema_trend, daily_returns
from .snapshot import IndicatorSnapshot, analyze_series
