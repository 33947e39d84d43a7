"""
Portfolio history replay.

Rebuilds one equity curve per strategy from the allocation log: quantities
accumulate day by day as log entries come due and every Friday the running
positions are valued at that day's close (last known close on holidays).
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, List, Mapping, Optional

import pandas as pd

from allocation.models import AllocationDecision, StrategyTag
from data.interfaces import PriceSeries

logger = logging.getLogger("core.simulation.history")

REPLAYED_STRATEGIES = (StrategyTag.MA_UNDERVALUED, StrategyTag.NAIVE_PROPORTIONAL)
FRIDAY = 4

@dataclass(frozen=True)
class PortfolioHistoryPoint:
    date: date
    values: Dict[StrategyTag, float] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        """Charting payload: epoch milliseconds (UTC midnight) plus one key per strategy."""
        midnight = datetime.combine(self.date, time.min, tzinfo=timezone.utc)
        payload = {"date": int(midnight.timestamp() * 1000)}
        for tag, value in self.values.items():
            payload[tag.value] = value
        return payload

def price_on_date(closes: Optional[pd.Series], day: date) -> float:
    """
    Close of the latest point dated on or before ``day``; 0.0 when there is none.
    ``closes`` is an oldest-first Series as built by PriceSeries.to_series().
    """
    if closes is None or closes.empty:
        return 0.0
    value = closes.asof(pd.Timestamp(day))
    if pd.isna(value):
        return 0.0
    return float(value)

class PortfolioHistorySimulator:
    """
    Stateless: every call to ``simulate`` starts from scratch, so identical
    inputs give identical curves.
    """

    def __init__(self, strategies=REPLAYED_STRATEGIES):
        self.strategies = tuple(strategies)

    def simulate(self,
                 decisions: Iterable[AllocationDecision],
                 prices: Mapping[str, PriceSeries],
                 as_of: Optional[date] = None) -> List[PortfolioHistoryPoint]:
        as_of = as_of or date.today()

        entries = [d for d in decisions if d.strategy in self.strategies]
        if not entries:
            return []

        # sorted() is stable, so same-timestamp entries keep their log order
        entries = sorted(entries, key=lambda d: d.timestamp)

        closes = {ticker: series.to_series() for ticker, series in prices.items()}
        positions: Dict[StrategyTag, Dict[str, float]] = {tag: {} for tag in self.strategies}

        points = []
        cursor = 0
        day = entries[0].timestamp.date()
        while day <= as_of:
            while cursor < len(entries) and entries[cursor].timestamp.date() <= day:
                entry = entries[cursor]
                held = positions[entry.strategy]
                held[entry.ticker] = held.get(entry.ticker, 0.0) + entry.quantity_delta
                cursor += 1

            if day.weekday() == FRIDAY:
                values = {
                    tag: sum((qty * price_on_date(closes.get(ticker), day) for ticker, qty in positions[tag].items()), 0.0)
                    for tag in self.strategies
                }
                points.append(PortfolioHistoryPoint(date=day, values=values))

            day += timedelta(days=1)

        missing = {e.ticker for e in entries} - set(closes)
        if missing:
            logger.warning(f"No price history for {sorted(missing)}, valued at 0")

        logger.info(f"Replayed {len(entries)} log entries into {len(points)} weekly points")
        return points
