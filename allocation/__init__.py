"""
Capital allocation: three strategies, the engine running them over one
holdings snapshot and the service persisting the outcome.
"""
from .models import StrategyTag, Holding, AllocationDecision, BudgetState, ItemResult, RunReport
from .base import AllocationStrategy, StrategyResult
from .ma_undervalued import MAUndervaluedStrategy
from .naive_proportional import NaiveProportionalStrategy
from .ema_trend_pair import EMATrendPairStrategy
from .engine import AllocationEngine, AllocationPlan
from .service import AllocationService
