import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from config.settings import ALLOCATION_CONFIG
from .base import AllocationStrategy
from .ema_trend_pair import EMATrendPairStrategy
from .ma_undervalued import MAUndervaluedStrategy
from .models import AllocationDecision, BudgetState, Holding, StrategyTag
from .naive_proportional import NaiveProportionalStrategy

logger = logging.getLogger("core.allocation.engine")

@dataclass
class AllocationPlan:
    """Everything one allocation run decided, before anything is persisted."""
    batch_id: int
    budget: float
    decisions: Dict[StrategyTag, List[AllocationDecision]] = field(default_factory=dict)
    updated_holdings: List[Holding] = field(default_factory=list)
    rolled_over: bool = False
    next_budget: Optional[BudgetState] = None

    @property
    def all_decisions(self) -> List[AllocationDecision]:
        return [d for tag in StrategyTag for d in self.decisions.get(tag, [])]

class AllocationEngine:
    """
    Runs the three strategies over one holdings snapshot and one budget.

    Pure: holdings passed in are not mutated and nothing is persisted, so
    the same inputs always produce an equal plan.
    """

    def __init__(self,
                 strategies: Optional[Sequence[AllocationStrategy]] = None,
                 replenish_amount: float = ALLOCATION_CONFIG["BUDGET_REPLENISH_AMOUNT"]):
        self.strategies = list(strategies) if strategies is not None else [
            MAUndervaluedStrategy(),
            NaiveProportionalStrategy(),
            EMATrendPairStrategy(),
        ]
        self.replenish_amount = replenish_amount

    def plan(self, holdings: Sequence[Holding], budget: BudgetState, timestamp: Optional[datetime] = None) -> AllocationPlan:
        timestamp = timestamp or datetime.now()
        snapshot = sorted(holdings, key=lambda h: h.ticker)
        batch_id = budget.next_batch_id

        logger.info(f"Allocating batch {batch_id}: budget {budget.amount:.2f} over {len(snapshot)} holdings")

        plan = AllocationPlan(batch_id=batch_id, budget=budget.amount)
        for strategy in self.strategies:
            # Every strategy sees the same untouched snapshot
            result = strategy.allocate(snapshot, budget.amount, batch_id, timestamp)
            plan.decisions[strategy.tag] = result.decisions

            if strategy.tag is StrategyTag.MA_UNDERVALUED:
                plan.rolled_over = result.rolled_over
                plan.updated_holdings = [result.updated_holdings[t] for t in sorted(result.updated_holdings)]

            logger.info(f"[{strategy.tag.value}] {len(result.decisions)} decisions, net {result.invested_total:.2f}")

        if plan.rolled_over:
            logger.warning(f"Batch {batch_id} rolled over, budget stays at {budget.amount:.2f}")
        else:
            plan.next_budget = budget.replenished(self.replenish_amount)

        return plan
