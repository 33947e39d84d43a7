import logging
from datetime import datetime
from typing import Sequence

from .base import AllocationStrategy, StrategyResult
from .models import Holding, StrategyTag

logger = logging.getLogger("core.allocation.naive_proportional")

class NaiveProportionalStrategy(AllocationStrategy):
    """
    Benchmark: splits the budget in proportion to each holding's current
    market value. Only produces log entries, holdings are never touched.
    """

    tag = StrategyTag.NAIVE_PROPORTIONAL

    def allocate(self, holdings: Sequence[Holding], budget: float, batch_id: int, timestamp: datetime) -> StrategyResult:
        result = StrategyResult(tag=self.tag)

        total_value = sum(h.market_value for h in holdings if h.current_price > 0)
        if total_value <= 0:
            logger.info(f"Total portfolio value is {total_value:.2f}, nothing to allocate")
            return result

        for h in holdings:
            if h.current_price <= 0:
                continue

            weight = h.market_value / total_value
            amount = budget * weight
            quantity = amount / h.current_price
            result.decisions.append(self._decision(h, batch_id, amount, quantity, timestamp))

        return result
