import logging
from dataclasses import dataclass, field, replace
from typing import List

from config.settings import INDICATOR_CONFIG
from core.exceptions import DataError, PersistenceError
from allocation.models import Holding, RunReport
from indicators import analyze_series

logger = logging.getLogger("core.analysis.portfolio")

@dataclass
class AnalysisReport:
    holdings: List[Holding] = field(default_factory=list)
    results: RunReport = field(default_factory=RunReport)

class PortfolioAnalyzer:
    """
    Refreshes price and indicators of every holding.
    One ticker failing (no data, provider down, write error) never stops
    the others.
    """

    def __init__(self, data_manager, holdings_store,
                 sma_period: int = INDICATOR_CONFIG["SMA_PERIOD"],
                 ema_period: int = INDICATOR_CONFIG["EMA_TREND_PERIOD"]):
        self.data_manager = data_manager
        self.store = holdings_store
        self.sma_period = sma_period
        self.ema_period = ema_period

    def analyze(self) -> AnalysisReport:
        report = AnalysisReport()
        holdings = sorted(self.store.load_holdings(), key=lambda h: h.ticker)
        logger.info(f"Analyzing {len(holdings)} holdings")

        for holding in holdings:
            try:
                series = self.data_manager.get_series(holding.ticker)
            except DataError as e:
                logger.warning(f"⚠️ Skipping {holding.ticker}: {e}")
                report.holdings.append(holding)
                report.results.record(holding.ticker, False, str(e))
                continue

            if len(series) == 0:
                report.holdings.append(holding)
                report.results.record(holding.ticker, False, "empty price series")
                continue

            snapshot = analyze_series(series, self.sma_period, self.ema_period)

            updated = replace(holding, current_price=snapshot.current_price)
            skipped = []
            if snapshot.sma is not None:
                updated.sma200 = snapshot.sma
            else:
                skipped.append(f"SMA{self.sma_period}")
            if snapshot.ema_trend is not None:
                updated.ema_trend = snapshot.ema_trend
            else:
                skipped.append(f"EMA-trend{self.ema_period}")

            try:
                self.store.save_holding(updated)
            except PersistenceError as e:
                logger.error(f"❌ Failed to update {holding.ticker}: {e}")
                report.holdings.append(holding)
                report.results.record(holding.ticker, False, str(e))
                continue

            report.holdings.append(updated)
            message = f"skipped {', '.join(skipped)}" if skipped else ""
            report.results.record(holding.ticker, True, message)
            logger.info(f"{updated.ticker}: price {updated.current_price:.2f}, "
                        f"SMA {updated.sma200:.2f}, EMA-trend {updated.ema_trend:.4f}")

        logger.info(f"Analysis done, {len(report.results.failures)} tickers failed")
        return report
