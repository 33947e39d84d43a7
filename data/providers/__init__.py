from .base import DataProvider
from .fmp_provider import FMPProvider
from .yfinance_provider import YFinanceProvider
from .factory import ProviderFactory
