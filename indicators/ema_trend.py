"""
Volatility-normalized exponential trend oscillator ("EMA-trend").

Not a plain EMA of price: daily returns are divided by an exponentially
weighted volatility estimate before being smoothed, so the value is
comparable across tickers. Positive for sustained up-trends, negative for
down-trends.
"""
import math
import numpy as np

from core.exceptions import DataError, InsufficientDataError
from data.interfaces import PriceSeries

def daily_returns(series: PriceSeries) -> np.ndarray:
    """
    Single-step returns, newest first: r[i] = (close[i] - close[i+1]) / close[i+1]
    """
    closes = np.array([p.close for p in series.newest_first()], dtype=float)
    if len(closes) < 2:
        return np.array([], dtype=float)
    return (closes[:-1] - closes[1:]) / closes[1:]

def compute_ema_trend(series: PriceSeries, period: int = 112) -> float:
    """
    Compute the EMA-trend of a daily close series.

    Returns are consumed newest first. eta = 1/period. The variance estimate
    is seeded with r[0]^2 and updated over all later returns; the signal is
    then seeded with sqrt(eta) * r[0] / sigma and each later return updates
    it with the current volatility first, then the variance.

    Args:
        series: Daily closes, any order (read through ``newest_first()``)
        period: Smoothing period

    Returns:
        float with the final signal value (0.0 for flat prices)

    Raises:
        InsufficientDataError: if the series has fewer than ``period`` points
        DataError: if a daily return is not finite
    """
    if period <= 0:
        raise ValueError(f"EMA-trend period must be positive, got {period}")

    if len(series) < period:
        raise InsufficientDataError(
            f"Not enough data to calculate {period}-day EMA Trend for {series.ticker}",
            required=period,
            available=len(series),
        )

    returns = daily_returns(series)
    if len(returns) == 0:
        return 0.0
    if not np.isfinite(returns).all():
        raise DataError(f"Non-finite daily return in {series.ticker} history")

    eta = 1.0 / period
    sqrt_eta = math.sqrt(eta)

    # 1. Variance warm-up over every return
    sigma_sq = returns[0] * returns[0]
    for r in returns[1:]:
        sigma_sq = (1 - eta) * sigma_sq + eta * (r * r)

    # 2. Signal, seeded with the warmed-up volatility; the variance keeps evolving
    phi = sqrt_eta * (returns[0] / math.sqrt(sigma_sq)) if sigma_sq > 0 else 0.0

    for r in returns[1:]:
        sigma = math.sqrt(sigma_sq)
        if sigma > 0:
            phi = (1 - eta) * phi + sqrt_eta * (r / sigma)
        sigma_sq = (1 - eta) * sigma_sq + eta * (r * r)

    return float(phi)
