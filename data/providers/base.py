from typing import Optional, Dict, Any

from config.settings import DATA_CONFIG
from data.interfaces import IQuoteProvider

class DataProvider(IQuoteProvider):
    """
    Base class for daily history providers.
    Holds the provider config and the history window shared by all of them.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.history_days = int(self.config.get("HISTORY_DAYS", DATA_CONFIG["HISTORY_DAYS"]))
        self.timeout = self.config.get("REQUEST_TIMEOUT", DATA_CONFIG["REQUEST_TIMEOUT"])
