"""
Aggregate metrics over the allocation log (totals, most bought ticker, batches).
"""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from allocation.models import AllocationDecision

@dataclass
class LogSummary:
    total_entries: int = 0
    total_amount: float = 0.0
    most_frequent_ticker: str = ""
    most_frequent_count: int = 0
    highest_invested_ticker: str = ""
    highest_invested_amount: float = 0.0
    batches: List[Tuple[int, List[AllocationDecision]]] = field(default_factory=list)

def summarize_logs(entries: Iterable[AllocationDecision]) -> LogSummary:
    entries = list(entries)
    summary = LogSummary(total_entries=len(entries))
    if not entries:
        return summary

    counts: Dict[str, int] = defaultdict(int)
    invested: Dict[str, float] = defaultdict(float)
    by_batch: Dict[int, List[AllocationDecision]] = defaultdict(list)

    for e in entries:
        summary.total_amount += e.invested_amount
        counts[e.ticker] += 1
        invested[e.ticker] += e.invested_amount
        by_batch[e.batch_id].append(e)

    # Sorted tickers + strict '>' keep ties deterministic
    for ticker in sorted(counts):
        if counts[ticker] > summary.most_frequent_count:
            summary.most_frequent_ticker = ticker
            summary.most_frequent_count = counts[ticker]

    for ticker in sorted(invested):
        if invested[ticker] > summary.highest_invested_amount:
            summary.highest_invested_ticker = ticker
            summary.highest_invested_amount = invested[ticker]

    summary.batches = [
        (batch_id, sorted(by_batch[batch_id], key=lambda d: d.timestamp, reverse=True))
        for batch_id in sorted(by_batch, reverse=True)
    ]
    return summary
