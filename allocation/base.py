from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Sequence

from .models import AllocationDecision, Holding, StrategyTag

@dataclass
class StrategyResult:
    """
    Output of one strategy over one holdings snapshot.
    ``updated_holdings`` only contains holdings the strategy changed
    (copies; the input snapshot is never mutated).
    """
    tag: StrategyTag
    decisions: List[AllocationDecision] = field(default_factory=list)
    updated_holdings: Dict[str, Holding] = field(default_factory=dict)
    rolled_over: bool = False

    @property
    def invested_total(self) -> float:
        return sum(d.invested_amount for d in self.decisions)

class AllocationStrategy(ABC):
    """
    Abstract Interface that all allocation strategies must implement.
    """

    tag: StrategyTag

    @abstractmethod
    def allocate(self, holdings: Sequence[Holding], budget: float, batch_id: int, timestamp: datetime) -> StrategyResult:
        """
        Turn the holdings snapshot and the budget into decisions.
        - holdings: snapshot, already in deterministic (ticker) order.
        - budget: cash to distribute in this batch.
        """
        pass

    def _decision(self, holding: Holding, batch_id: int, amount: float, quantity: float, timestamp: datetime) -> AllocationDecision:
        return AllocationDecision(
            ticker=holding.ticker,
            name=holding.name,
            batch_id=batch_id,
            invested_amount=amount,
            price_per_share=holding.current_price,
            quantity_delta=quantity,
            strategy=self.tag,
            timestamp=timestamp,
        )
