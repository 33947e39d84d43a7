import logging
from datetime import datetime
from typing import List, Optional, Sequence

from config.settings import ALLOCATION_CONFIG
from .base import AllocationStrategy, StrategyResult
from .models import Holding, StrategyTag

logger = logging.getLogger("core.allocation.ema_trend_pair")

class EMATrendPairStrategy(AllocationStrategy):
    """
    Logs a symbolic one-share sell of the holding with the most negative
    EMA-trend and splits the budget between the two strongest positive
    trends, weighted by their EMA-trend values. Holdings are never touched.
    """

    tag = StrategyTag.EMA_TREND_PAIR

    def __init__(self, min_holdings: int = ALLOCATION_CONFIG["EMA_MIN_HOLDINGS"]):
        self.min_holdings = min_holdings

    @staticmethod
    def rank(holdings: Sequence[Holding]):
        """
        Single pass: (most negative holding, [best, second best]).
        Comparisons are strict so the first holding met wins a tie.
        """
        lowest: Optional[Holding] = None
        first: Optional[Holding] = None
        second: Optional[Holding] = None

        for h in holdings:
            if lowest is None or h.ema_trend < lowest.ema_trend:
                lowest = h

            if first is None or h.ema_trend > first.ema_trend:
                second = first
                first = h
            elif second is None or h.ema_trend > second.ema_trend:
                second = h

        top: List[Holding] = [h for h in (first, second) if h is not None]
        return lowest, top

    def allocate(self, holdings: Sequence[Holding], budget: float, batch_id: int, timestamp: datetime) -> StrategyResult:
        result = StrategyResult(tag=self.tag)

        if len(holdings) < self.min_holdings:
            logger.info(f"EMA-trend pair needs at least {self.min_holdings} holdings, got {len(holdings)}")
            return result

        lowest, top = self.rank(holdings)

        # Sell
        if lowest is not None and lowest.ema_trend < 0:
            result.decisions.append(
                self._decision(lowest, batch_id, -lowest.current_price, -1.0, timestamp)
            )
            logger.info(f"{lowest.ticker}: weakest trend ({lowest.ema_trend:.4f}), symbolic sell")

        # Buy
        if len(top) < 2 or not all(h.ema_trend > 0 for h in top):
            return result

        total_positive_ema = top[0].ema_trend + top[1].ema_trend
        if total_positive_ema <= 0:
            return result

        for h in top:
            if h.current_price <= 0:
                logger.warning(f"{h.ticker}: no valid price, buy skipped")
                continue

            weight = h.ema_trend / total_positive_ema
            amount = budget * weight
            quantity = amount / h.current_price
            result.decisions.append(self._decision(h, batch_id, amount, quantity, timestamp))

        return result
