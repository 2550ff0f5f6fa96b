"""Shared defaults.

Keeps strategy and provider defaults in one place so the CLI, settings
and strategy constructors agree.
"""

# ── Backtest defaults ──
DEFAULT_INITIAL_CAPITAL = 10_000.0
DEFAULT_TRANSACTION_FEE = 0.0
DEFAULT_HISTORY_BUFFER = 20  # records kept beyond the lookback

# ── Trend following ──
DEFAULT_SMA_PERIOD = 50
DEFAULT_MACD_FAST = 12
DEFAULT_MACD_SLOW = 26
DEFAULT_MACD_SIGNAL = 9

# ── Golden cross ──
DEFAULT_SHORT_PERIOD = 50
DEFAULT_LONG_PERIOD = 200
DEFAULT_RSI_PERIOD = 14
DEFAULT_RSI_BUY_THRESHOLD = 50.0
DEFAULT_RSI_SELL_THRESHOLD = 50.0

# ── Value investing ──
DEFAULT_MAX_PE_RATIO = 15.0
DEFAULT_MIN_EARNINGS_GROWTH = 10.0

# ── Alpha Vantage ──
ALPHA_VANTAGE_BASE_URL = "https://www.alphavantage.co/query"
ALPHA_VANTAGE_COMPACT_LIMIT = 100  # compact output returns the latest 100 points
TIME_SERIES_DAILY_KEY = "Time Series (Daily)"
ANNUAL_EARNINGS_KEY = "annualEarnings"
