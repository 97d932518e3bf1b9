"""ProjectDollar: portfolio valuation and EUR/USD cash management."""

__version__ = "0.1.0"
