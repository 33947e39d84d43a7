import logging
from datetime import datetime
from typing import Optional

from core.exceptions import PersistenceError
from .engine import AllocationEngine, AllocationPlan
from .models import RunReport

logger = logging.getLogger("core.allocation.service")

class AllocationService:
    """
    Loads the budget and holdings, plans the batch and persists the outcome.

    Persistence is best-effort: every holding, log entry and the budget is
    written independently and the per-item outcome lands in the RunReport.
    A failed write is logged and the loop moves on.
    """

    def __init__(self, store, engine: Optional[AllocationEngine] = None):
        # store: anything with the holdings, log and budget store methods (e.g. data.storage.Database)
        self.store = store
        self.engine = engine or AllocationEngine()

    def run(self, timestamp: Optional[datetime] = None):
        budget = self.store.load_budget()
        holdings = self.store.load_holdings()

        plan = self.engine.plan(holdings, budget, timestamp)
        report = self.persist(plan)

        logger.info(f"✅ Batch {plan.batch_id} done: {len(report.results)} writes, {len(report.failures)} failed")
        return plan, report

    def persist(self, plan: AllocationPlan) -> RunReport:
        report = RunReport()

        for holding in plan.updated_holdings:
            key = f"holding:{holding.ticker}"
            try:
                self.store.save_holding(holding)
                report.record(key, True)
            except PersistenceError as e:
                logger.error(f"❌ Failed to update holding {holding.ticker}: {e}")
                report.record(key, False, str(e))

        for decision in plan.all_decisions:
            key = f"log:{decision.strategy.value}:{decision.ticker}"
            try:
                log_id = self.store.append_decision(decision)
                report.record(key, True, f"log_id={log_id}")
            except PersistenceError as e:
                logger.error(f"❌ Failed to log {decision.strategy.value} decision for {decision.ticker}: {e}")
                report.record(key, False, str(e))

        if plan.next_budget is not None:
            try:
                self.store.save_budget(plan.next_budget)
                report.record("budget", True)
            except PersistenceError as e:
                logger.error(f"❌ Failed to reset budget after allocation: {e}")
                report.record("budget", False, str(e))

        return report
