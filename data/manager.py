import logging
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional

from core.exceptions import DataError, PersistenceError
from data.interfaces import PriceSeries, SearchResult
from data.providers.factory import ProviderFactory
from data.storage.database import Database

logger = logging.getLogger("core.data.manager")

class DataManager:
    """
    Orchestrates Data Flow:
    Cache -> Provider (failover) -> Cache

    A cached series is served when it was fetched today; otherwise the
    providers are asked and the cache refreshed.
    """

    def __init__(self, providers: ProviderFactory, db: Database, today: Callable[[], date] = date.today):
        self.providers = providers
        self.db = db
        self.today = today

    def get_series(self, ticker: str) -> PriceSeries:
        """
        Daily closes for ``ticker``.

        Raises DataNotFoundError / TransientDataError from the provider layer.
        A cache failure is logged and never hides fresh provider data.
        """
        cached = self._load_fresh_cache(ticker)
        if cached is not None:
            logger.debug(f"{ticker}: serving {len(cached)} cached closes")
            return cached

        series = self.providers.fetch_series_with_failover(ticker)

        try:
            self.db.save_series(series, fetched_on=self.today())
        except PersistenceError as e:
            logger.error(f"Failed to cache prices for {ticker}: {e}")

        return series

    def get_many(self, tickers: Iterable[str]) -> Dict[str, PriceSeries]:
        """Series for every ticker that could be fetched; failures are logged and left out."""
        result = {}
        for ticker in sorted(set(tickers)):
            try:
                result[ticker] = self.get_series(ticker)
            except DataError as e:
                logger.warning(f"⚠️ Skipping {ticker}: {e}")
        return result

    def search(self, query: str) -> List[SearchResult]:
        return self.providers.search(query)

    def _load_fresh_cache(self, ticker: str) -> Optional[PriceSeries]:
        try:
            if self.db.series_fetched_on(ticker) != self.today():
                return None
            return self.db.load_series(ticker)
        except PersistenceError as e:
            logger.error(f"Price cache unavailable for {ticker}: {e}")
            return None
