"""
Price data models
"""

import math
from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict


@dataclass(frozen=True)
class PriceRecord:
    """One trading day for one symbol."""
    date: date
    open: float
    high: float
    low: float
    close: float
    volume: int
    current_eps: float = 0.0   # latest annual EPS, 0 when not fetched
    previous_eps: float = 0.0  # prior annual EPS
    symbol: str = ""

    def is_valid(self) -> bool:
        """Positive finite prices and a non-negative volume."""
        prices = (self.open, self.high, self.low, self.close)
        if not all(math.isfinite(p) and p > 0 for p in prices):
            return False
        return self.volume >= 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data
