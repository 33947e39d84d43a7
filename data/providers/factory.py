from typing import List, Dict, Any, Optional
import logging

from core.exceptions import DataNotFoundError, TransientDataError
from data.interfaces import PriceSeries, SearchResult, ISearchProvider
from .base import DataProvider
from .fmp_provider import FMPProvider
from .yfinance_provider import YFinanceProvider

logger = logging.getLogger("core.data.factory")

class ProviderFactory:
    """
    Factory to manage and retrieve data providers.
    Implements the Failover Strategy (each provider is tried once, no retries).
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self._providers: List[DataProvider] = []
        self._initialize_providers()

    def _initialize_providers(self):
        """Initialize all enabled providers based on config/env"""

        # 1. FMP when an API key is configured
        if self.config.get('FMP_API_KEY'):
            self._providers.append(FMPProvider(self.config))

        # 2. YFinance needs no key
        if self.config.get('USE_YFINANCE', True):
            self._providers.append(YFinanceProvider(self.config))

        # Sort by priority
        self._providers.sort(key=lambda p: p.priority)
        logger.info(f"🏭 ProviderFactory initialized with {len(self._providers)} providers: {[p.name for p in self._providers]}")

    def get_provider(self, name: str = None) -> Optional[DataProvider]:
        """Get a specific provider by name"""
        if name:
            for p in self._providers:
                if p.name == name:
                    return p
            return None
        return self._providers[0] if self._providers else None

    def get_search_provider(self) -> Optional[ISearchProvider]:
        for p in self._providers:
            if isinstance(p, ISearchProvider):
                return p
        return None

    def fetch_series_with_failover(self, ticker: str) -> PriceSeries:
        """
        Attempt to fetch the series from providers in priority order.

        Raises DataNotFoundError when every provider reported the ticker as
        unknown, TransientDataError otherwise.
        """
        if not self._providers:
            raise TransientDataError("No data providers configured")

        errors = []
        all_not_found = True
        for provider in self._providers:
            try:
                series = provider.fetch_series(ticker)
                if len(series) > 0:
                    logger.info(f"✅ {ticker} fetched successfully from {provider.name}")
                    return series
                errors.append(f"{provider.name}: empty series")
            except DataNotFoundError as e:
                logger.warning(f"⚠️ {provider.name} has no data for {ticker}: {e}")
                errors.append(f"{provider.name}: {e}")
            except TransientDataError as e:
                logger.warning(f"⚠️ {provider.name} failed for {ticker}: {e}")
                errors.append(f"{provider.name}: {e}")
                all_not_found = False

        logger.error(f"❌ All providers failed for {ticker}. Errors: {errors}")
        if all_not_found:
            raise DataNotFoundError(f"No provider has data for {ticker}", resource=ticker)
        raise TransientDataError(f"All providers failed for {ticker}: {errors}")

    def search(self, query: str) -> List[SearchResult]:
        provider = self.get_search_provider()
        if provider is None:
            logger.warning("No search provider configured (FMP_API_KEY missing)")
            return []
        return provider.search(query)
