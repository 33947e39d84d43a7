import math
from abc import ABC, abstractmethod
from typing import List, Dict, Iterable, Tuple
from dataclasses import dataclass, field
from datetime import date
import pandas as pd

@dataclass(frozen=True)
class PricePoint:
    """Daily close for one calendar day."""
    date: date
    close: float

    def __post_init__(self):
        if not math.isfinite(self.close) or self.close <= 0:
            raise ValueError(f"Close must be a positive number, got {self.close} on {self.date}")

    def to_dict(self) -> Dict:
        return {"date": self.date.isoformat(), "close": self.close}

@dataclass(frozen=True)
class PriceSeries:
    """
    Daily closes for one ticker.

    Points may arrive in either order. Consumers never rely on the stored
    order: they ask for ``newest_first()`` (indicators) or ``oldest_first()``
    (history replay) explicitly.
    """
    ticker: str
    points: Tuple[PricePoint, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))
        seen = set()
        for p in self.points:
            if p.date in seen:
                raise ValueError(f"Duplicate price date {p.date} for {self.ticker}")
            seen.add(p.date)

    @classmethod
    def from_records(cls, ticker: str, records: Iterable[Dict]) -> "PriceSeries":
        """Build from dicts with 'date' (ISO string or date) and 'close'."""
        points = []
        for r in records:
            d = r["date"]
            if isinstance(d, str):
                d = date.fromisoformat(d[:10])
            points.append(PricePoint(date=d, close=float(r["close"])))
        return cls(ticker=ticker, points=tuple(points))

    def __len__(self) -> int:
        return len(self.points)

    def newest_first(self) -> List[PricePoint]:
        return sorted(self.points, key=lambda p: p.date, reverse=True)

    def oldest_first(self) -> List[PricePoint]:
        return sorted(self.points, key=lambda p: p.date)

    @property
    def latest_close(self) -> float:
        if not self.points:
            raise ValueError(f"Empty price series for {self.ticker}")
        return max(self.points, key=lambda p: p.date).close

    def to_series(self) -> pd.Series:
        """Closes as a pandas Series indexed by Timestamp, oldest first."""
        ordered = self.oldest_first()
        return pd.Series(
            [p.close for p in ordered],
            index=pd.DatetimeIndex([pd.Timestamp(p.date) for p in ordered]),
            name=self.ticker,
            dtype=float,
        )

@dataclass(frozen=True)
class SearchResult:
    """Ticker search hit as returned by the search provider."""
    ticker: str
    name: str
    currency: str = ""
    exchange: str = ""

class IQuoteProvider(ABC):
    """
    Interface for all daily history providers.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def priority(self) -> int:
        """Priority (Lower is better/primary)"""
        pass

    @abstractmethod
    def fetch_series(self, ticker: str) -> PriceSeries:
        """
        Fetch the daily close history for ``ticker``, newest first.

        Raises DataNotFoundError when the ticker is unknown/empty and
        TransientDataError on network or payload failures.
        """
        pass

class ISearchProvider(ABC):
    """
    Interface for ticker search (used by the surrounding application only).
    """

    @abstractmethod
    def search(self, query: str) -> List[SearchResult]:
        pass
