import logging
import math
from dataclasses import replace
from datetime import datetime
from typing import Sequence

from config.settings import ALLOCATION_CONFIG
from .base import AllocationStrategy, StrategyResult
from .models import Holding, StrategyTag

logger = logging.getLogger("core.allocation.ma_undervalued")

def round_half_up(value: float, digits: int = 2) -> float:
    """Round to ``digits`` decimals with halves going up (quantities are never negative)."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale

class MAUndervaluedStrategy(AllocationStrategy):
    """
    Invests the whole budget in holdings trading below their 200-day SMA,
    weighted by how far below the average they are (score = sma200 - price).

    The only strategy that changes holdings: quantity, average cost and the
    recommendation text are updated for every bought ticker and the
    recommendation of everything else is cleared.
    """

    tag = StrategyTag.MA_UNDERVALUED

    def __init__(self, currency_symbol: str = ALLOCATION_CONFIG["CURRENCY_SYMBOL"]):
        self.currency_symbol = currency_symbol

    @staticmethod
    def is_eligible(holding: Holding) -> bool:
        return holding.below_ma and holding.sma200 > 0 and holding.current_price > 0

    def allocate(self, holdings: Sequence[Holding], budget: float, batch_id: int, timestamp: datetime) -> StrategyResult:
        result = StrategyResult(tag=self.tag)

        eligible = [h for h in holdings if self.is_eligible(h)]
        # Scores are summed as-is; only the aggregate gates the run
        total_score = sum(h.sma200 - h.current_price for h in eligible)

        if not eligible or total_score <= 0:
            logger.info(f"No eligible stocks for investment (total score {total_score:.4f}). Budget will roll over.")
            result.rolled_over = True
            return result

        for h in eligible:
            score = h.sma200 - h.current_price
            weight = score / total_score
            amount = budget * weight
            quantity = amount / h.current_price

            result.decisions.append(self._decision(h, batch_id, amount, quantity, timestamp))

            new_total_quantity = h.quantity + quantity
            if new_total_quantity == 0:
                logger.warning(f"{h.ticker}: zero resulting quantity, holding left unchanged")
                continue

            new_average_cost = (h.average_cost * h.quantity + amount) / new_total_quantity
            result.updated_holdings[h.ticker] = replace(
                h,
                quantity=round_half_up(new_total_quantity),
                average_cost=new_average_cost,
                recommendation=f"Invest {self.currency_symbol}{amount:.2f}",
            )
            logger.info(f"{h.ticker}: weight {weight:.2%} -> invest {amount:.2f} ({quantity:.4f} shares)")

        selected = {h.ticker for h in eligible}
        for h in holdings:
            if h.ticker not in selected and h.recommendation:
                result.updated_holdings[h.ticker] = replace(h, recommendation="")

        return result
