import yfinance as yf
import pandas as pd
import logging

from core.exceptions import DataNotFoundError, TransientDataError
from data.interfaces import PricePoint, PriceSeries
from .base import DataProvider

logger = logging.getLogger("core.data.yfinance")

class YFinanceProvider(DataProvider):
    """
    Fallback daily history provider using Yahoo Finance.
    """

    @property
    def name(self) -> str:
        return "YFINANCE"

    @property
    def priority(self) -> int:
        return 10 # Fallback

    def fetch_series(self, ticker: str) -> PriceSeries:
        logger.info(f"Fetching {ticker} from YFinance (1d)...")
        try:
            df = yf.Ticker(ticker).history(
                period="2y",
                interval="1d",
                auto_adjust=False,
                actions=False
            )
        except Exception as e:
            raise TransientDataError(f"YFinance fetch failed for {ticker}: {e}") from e

        if df is None or df.empty or "Close" not in df.columns:
            raise DataNotFoundError(f"No data returned for {ticker}", resource=ticker)

        closes = df["Close"].dropna()
        closes = closes[closes > 0]
        if closes.empty:
            raise DataNotFoundError(f"No valid closes returned for {ticker}", resource=ticker)

        # Keep the same window the primary provider serves
        closes = closes.iloc[-self.history_days:]

        try:
            points = [
                PricePoint(date=pd.Timestamp(ts).date(), close=float(close))
                for ts, close in closes[::-1].items()
            ]
            return PriceSeries(ticker=ticker, points=tuple(points))
        except ValueError as e:
            raise TransientDataError(f"Malformed YFinance history for {ticker}: {e}") from e
