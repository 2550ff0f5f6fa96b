"""
Stock Signal - technical and fundamental trading signals with a backtest engine
"""

__version__ = "0.1.0"
