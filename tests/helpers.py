from datetime import date, datetime, timedelta

from allocation.models import AllocationDecision, Holding, StrategyTag
from data.interfaces import PricePoint, PriceSeries

def make_series(ticker, closes, end=date(2024, 6, 28)):
    """Series with one close per calendar day; ``closes`` given oldest first."""
    n = len(closes)
    points = [PricePoint(date=end - timedelta(days=n - 1 - i), close=float(c)) for i, c in enumerate(closes)]
    return PriceSeries(ticker=ticker, points=tuple(points))

def make_decision(ticker, quantity, when, strategy=StrategyTag.MA_UNDERVALUED, batch_id=1, price=10.0):
    if isinstance(when, date) and not isinstance(when, datetime):
        when = datetime(when.year, when.month, when.day, 12, 0)
    return AllocationDecision(
        ticker=ticker,
        name=ticker,
        batch_id=batch_id,
        invested_amount=quantity * price,
        price_per_share=price,
        quantity_delta=quantity,
        strategy=strategy,
        timestamp=when,
    )

def holding(ticker, price=0.0, sma=0.0, ema=0.0, quantity=0.0, cost=0.0, recommendation=""):
    return Holding(ticker=ticker, name=f"{ticker} Corp", quantity=quantity, average_cost=cost,
                   current_price=price, sma200=sma, ema_trend=ema, recommendation=recommendation)
