from dataclasses import dataclass, field, asdict
from enum import Enum
from datetime import datetime
from typing import Optional, Dict, Any

class StrategyTag(Enum):
    """Strategy identifiers. Each one also names its own log collection."""
    MA_UNDERVALUED = "ma-undervalued"
    NAIVE_PROPORTIONAL = "naive-proportional"
    EMA_TREND_PAIR = "ema-trend-pair"

@dataclass
class Holding:
    """
    One position of the portfolio, keyed by ticker.
    Price/indicator fields are refreshed by the analysis run; quantity,
    average cost and recommendation by the MA-undervalued strategy.
    """
    ticker: str
    name: str = ""
    quantity: float = 0.0
    average_cost: float = 0.0
    current_price: float = 0.0
    sma200: float = 0.0
    ema_trend: float = 0.0
    recommendation: str = ""

    @property
    def below_ma(self) -> bool:
        return self.current_price < self.sma200

    @property
    def market_value(self) -> float:
        return self.current_price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["below_ma"] = self.below_ma
        return d

@dataclass(frozen=True)
class AllocationDecision:
    """
    A single log entry produced by an allocation run. Never mutated.
    Negative amounts/quantities denote a (hypothetical) sell.
    """
    ticker: str
    name: str
    batch_id: int
    invested_amount: float
    price_per_share: float
    quantity_delta: float
    strategy: StrategyTag
    timestamp: datetime
    log_id: Optional[int] = None # Assigned by the log store

    def to_dict(self) -> Dict[str, Any]:
        return {
            "log_id": self.log_id,
            "batch_id": self.batch_id,
            "ticker": self.ticker,
            "name": self.name,
            "invested_amount": self.invested_amount,
            "price_per_share": self.price_per_share,
            "quantity_delta": self.quantity_delta,
            "strategy": self.strategy.value,
            "timestamp": self.timestamp.isoformat(),
        }

@dataclass(frozen=True)
class BudgetState:
    """Cash available for the next run and the id the next batch will get."""
    amount: float
    next_batch_id: int

    def replenished(self, amount: float) -> "BudgetState":
        return BudgetState(amount=amount, next_batch_id=self.next_batch_id + 1)

@dataclass(frozen=True)
class ItemResult:
    """Outcome of one step of a best-effort loop (one ticker, one log entry...)."""
    key: str
    ok: bool
    message: str = ""

@dataclass
class RunReport:
    """Per-item results of a best-effort run."""
    results: list = field(default_factory=list)

    def record(self, key: str, ok: bool, message: str = "") -> ItemResult:
        item = ItemResult(key=key, ok=ok, message=message)
        self.results.append(item)
        return item

    @property
    def failures(self) -> list:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failures
