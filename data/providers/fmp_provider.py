import os
import logging
import requests
from typing import List, Optional, Dict, Any

from config.settings import FMP_BASE_URL, DATA_CONFIG
from core.exceptions import DataNotFoundError, TransientDataError
from data.interfaces import PriceSeries, SearchResult, ISearchProvider
from .base import DataProvider

logger = logging.getLogger("core.data.fmp")

class FMPProvider(DataProvider, ISearchProvider):
    """
    Financial Modeling Prep provider.
    Serves both the daily history (newest first) and the ticker search.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, session: Optional[requests.Session] = None):
        super().__init__(config)
        self.api_key = self.config.get("FMP_API_KEY") or os.getenv("FMP_API_KEY")
        self.base_url = self.config.get("FMP_BASE_URL", FMP_BASE_URL).rstrip("/")
        self.search_limit = int(self.config.get("SEARCH_LIMIT", DATA_CONFIG["SEARCH_LIMIT"]))
        self.session = session or requests.Session()

    @property
    def name(self) -> str:
        return "FMP"

    @property
    def priority(self) -> int:
        return 1  # Primary

    def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        if not self.api_key:
            raise TransientDataError("FMP API key missing")

        try:
            response = self.session.get(
                f"{self.base_url}/{path}",
                params={**params, "apikey": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransientDataError(f"FMP request failed for {path}: {e}") from e

        if response.status_code == 404:
            raise DataNotFoundError(f"FMP returned 404 for {path}", resource=path)
        if response.status_code != 200:
            raise TransientDataError(f"Bad status from FMP for {path}: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise TransientDataError(f"Failed to decode FMP response for {path}: {e}") from e

    def fetch_series(self, ticker: str) -> PriceSeries:
        logger.info(f"🌐 Fetching '{ticker}' from FMP...")
        data = self._get_json(f"historical-price-full/{ticker}", {"timeseries": self.history_days})

        historical = data.get("historical") if isinstance(data, dict) else None
        if not historical:
            raise DataNotFoundError(f"No historical prices found for {ticker}", resource=ticker)

        try:
            series = PriceSeries.from_records(ticker, historical)
        except (KeyError, TypeError, ValueError) as e:
            raise TransientDataError(f"Malformed FMP history for {ticker}: {e}") from e

        logger.info(f"✅ FMP: {len(series)} daily closes fetched for {ticker}")
        return series

    def search(self, query: str) -> List[SearchResult]:
        data = self._get_json("search", {"query": query, "limit": self.search_limit})
        if not isinstance(data, list):
            raise TransientDataError(f"Unexpected FMP search payload for {query!r}")

        return [
            SearchResult(
                ticker=item.get("symbol", ""),
                name=item.get("name", ""),
                currency=item.get("currency") or "",
                exchange=item.get("exchangeShortName") or "",
            )
            for item in data
            if item.get("symbol")
        ]
