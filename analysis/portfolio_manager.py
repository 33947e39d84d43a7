import logging
from dataclasses import replace
from typing import List, Optional

from allocation.models import BudgetState, Holding
from core.utils import parse_amount
from data.interfaces import SearchResult

logger = logging.getLogger("core.analysis.manager")

class PortfolioManager:
    """
    Holdings and budget bookkeeping on top of the store.
    """

    def __init__(self, store, data_manager=None):
        self.store = store
        self.data_manager = data_manager

    def list_holdings(self) -> List[Holding]:
        return self.store.load_holdings()

    def add_holding(self, ticker: str, name: str = "", quantity: float = 0.0, average_cost: float = 0.0) -> Holding:
        """Create (or replace) a holding. Indicators start at zero until the next analysis."""
        ticker = ticker.strip().upper()
        if not ticker:
            raise ValueError("Ticker cannot be empty")
        if quantity < 0 or average_cost < 0:
            raise ValueError("Quantity and average cost must be non-negative")

        holding = Holding(ticker=ticker, name=name, quantity=quantity, average_cost=average_cost)
        self.store.save_holding(holding)
        logger.info(f"➕ Added {ticker} ({quantity} @ {average_cost:.2f})")
        return holding

    def update_holding(self, ticker: str, quantity: float, average_cost: float) -> Optional[Holding]:
        """Overwrite quantity and average cost, keeping price and indicators. None if unknown."""
        ticker = ticker.strip().upper()
        if quantity < 0 or average_cost < 0:
            raise ValueError("Quantity and average cost must be non-negative")

        current = self.store.get_holding(ticker)
        if current is None:
            logger.warning(f"Cannot update {ticker}: not in portfolio")
            return None

        updated = replace(current, quantity=quantity, average_cost=average_cost)
        self.store.save_holding(updated)
        logger.info(f"✏️ Updated {ticker} ({quantity} @ {average_cost:.2f})")
        return updated

    def remove_holding(self, ticker: str) -> bool:
        removed = self.store.delete_holding(ticker.strip().upper())
        if removed:
            logger.info(f"🗑️ Removed {ticker.upper()}")
        return removed

    def set_budget(self, raw_amount) -> BudgetState:
        """Set the cash for the next run, keeping the batch counter."""
        amount = parse_amount(raw_amount)
        current = self.store.load_budget()
        state = BudgetState(amount=amount, next_batch_id=current.next_batch_id)
        self.store.save_budget(state)
        logger.info(f"Budget set to {amount:.2f}")
        return state

    def search(self, query: str) -> List[SearchResult]:
        query = query.strip()
        if not query or self.data_manager is None:
            return []
        return self.data_manager.search(query)
