"""
Simple moving average over daily closes.
"""
import numpy as np

from core.exceptions import InsufficientDataError
from data.interfaces import PriceSeries

def compute_sma(series: PriceSeries, period: int = 200) -> float:
    """
    Mean of the ``period`` most recent closes.

    Args:
        series: Daily closes, any order (read through ``newest_first()``)
        period: Number of closes to average

    Returns:
        float with the SMA value

    Raises:
        InsufficientDataError: if the series has fewer than ``period`` points
    """
    if period <= 0:
        raise ValueError(f"SMA period must be positive, got {period}")

    if len(series) < period:
        raise InsufficientDataError(
            f"Not enough data to calculate {period}-day SMA for {series.ticker}",
            required=period,
            available=len(series),
        )

    closes = np.array([p.close for p in series.newest_first()[:period]], dtype=float)
    return float(closes.mean())
