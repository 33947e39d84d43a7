"""
Small parsing helpers shared by the CLI and the portfolio manager.
"""
import math
import logging
from typing import Optional

logger = logging.getLogger("core.utils")

def parse_amount(raw: Optional[str]) -> float:
    """
    Parse a user supplied amount, accepting a decimal comma ("12,5").

    Malformed, empty, non-finite or negative input maps to 0.0. Never raises.
    """
    if raw is None:
        return 0.0

    text = str(raw).strip().replace(",", ".")
    if not text:
        return 0.0

    try:
        value = float(text)
    except ValueError:
        logger.warning(f"Could not parse amount {raw!r}, using 0")
        return 0.0

    if not math.isfinite(value) or value < 0:
        logger.warning(f"Rejected amount {raw!r}, using 0")
        return 0.0

    return value
