"""Application-wide exception hierarchy."""

from typing import Optional


class StockSignalError(Exception):
    """Base exception for all Stock Signal errors."""

    def __init__(self, message: str = "", code: str = ""):
        self.message = message
        self.code = code
        super().__init__(message)


class ConfigurationError(StockSignalError):
    """Invalid constructor parameters or settings."""

    def __init__(self, message: str = "Configuration error", code: str = "CONFIGURATION_ERROR"):
        super().__init__(message, code)


class DataError(StockSignalError):
    """Input data that cannot produce a meaningful result."""

    def __init__(self, message: str = "Data error", code: str = "DATA_ERROR"):
        super().__init__(message, code)


class InsufficientDataError(StockSignalError):
    """Series shorter than a computation requires."""

    def __init__(
        self,
        message: str = "Insufficient data",
        code: str = "INSUFFICIENT_DATA",
        available: Optional[int] = None,
        required: Optional[int] = None,
    ):
        self.available = available
        self.required = required
        super().__init__(message, code)


class MarketDataError(StockSignalError):
    """Market data provider errors."""

    def __init__(self, message: str = "Market data error", code: str = "MARKET_DATA_ERROR"):
        super().__init__(message, code)


class TradingError(StockSignalError):
    """Simulated trading errors."""

    def __init__(self, message: str = "Trading error", code: str = "TRADING_ERROR"):
        super().__init__(message, code)
