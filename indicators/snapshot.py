import logging
from dataclasses import dataclass
from typing import Optional

from core.exceptions import DataError, InsufficientDataError
from data.interfaces import PriceSeries
from .moving_average import compute_sma
from .ema_trend import compute_ema_trend

logger = logging.getLogger("core.indicators")

@dataclass(frozen=True)
class IndicatorSnapshot:
    """Latest price plus whichever indicators the history was long enough for."""
    current_price: float
    sma: Optional[float] = None
    ema_trend: Optional[float] = None

    @property
    def complete(self) -> bool:
        return self.sma is not None and self.ema_trend is not None

def analyze_series(series: PriceSeries, sma_period: int = 200, ema_period: int = 112) -> IndicatorSnapshot:
    """
    Compute SMA and EMA-trend independently. An indicator whose period is
    longer than the history (or whose inputs are unusable) is left as None;
    the current price is always set.
    """
    current_price = series.latest_close

    sma = None
    try:
        sma = compute_sma(series, sma_period)
    except InsufficientDataError as e:
        logger.warning(f"{series.ticker}: {e} ({e.available}/{e.required} closes)")

    ema = None
    try:
        ema = compute_ema_trend(series, ema_period)
    except InsufficientDataError as e:
        logger.warning(f"{series.ticker}: {e} ({e.available}/{e.required} closes)")
    except DataError as e:
        logger.warning(f"{series.ticker}: EMA-trend skipped, {e}")

    return IndicatorSnapshot(current_price=current_price, sma=sma, ema_trend=ema)
