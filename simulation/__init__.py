from .history import PortfolioHistoryPoint, PortfolioHistorySimulator, price_on_date
