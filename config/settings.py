"""
⚙️ GLOBAL SETTINGS
==================
Centralized configuration for the portfolio advisor.
Values come from the environment (or a local .env file) with sane defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base Paths
BASE_DIR = Path(__file__).resolve().parent.parent
LOG_DIR = Path(os.getenv("LOG_DIR", BASE_DIR / "logs"))
DATA_DIR = BASE_DIR / "data"

DATABASE_PATH = Path(os.getenv("DATABASE_PATH", DATA_DIR / "storage" / "portfolio.db"))

# API Keys
FMP_API_KEY = os.getenv("FMP_API_KEY")

# System Configuration
SYSTEM_CONFIG = {
    "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO"),
}

# Indicator periods (daily closes)
INDICATOR_CONFIG = {
    "SMA_PERIOD": 200,
    "EMA_TREND_PERIOD": 112,
}

# Allocation Configuration
ALLOCATION_CONFIG = {
    "BUDGET_REPLENISH_AMOUNT": 100.0,  # Budget after a successful MA run
    "DEFAULT_BUDGET": 100.0,           # Budget when no state is stored yet
    "FIRST_BATCH_ID": 1,
    "EMA_MIN_HOLDINGS": 3,             # EMA pair strategy needs a seller + 2 buyers
    "CURRENCY_SYMBOL": "€",
}

# Data Collection Configuration
DATA_CONFIG = {
    "HISTORY_DAYS": 250,  # Trading days requested per ticker
    "SEARCH_LIMIT": 10,
    "REQUEST_TIMEOUT": 10,  # seconds
    "USE_YFINANCE": os.getenv("USE_YFINANCE", "True").lower() == "true",
}

FMP_BASE_URL = os.getenv("FMP_BASE_URL", "https://financialmodelingprep.com/api/v3")
