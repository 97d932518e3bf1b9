# projectdollar/utils/__init__.py
"""
Utility modules for ProjectDollar.

This package contains cross-cutting utilities used throughout the application:
- logging: Logging configuration and setup with correlation ID support
- context: Request context management for correlation IDs
- fx_conversion: EUR/USD conversion arithmetic

Usage:
    from projectdollar.utils import setup_logging, get_logger
    from projectdollar.utils import get_correlation_id, set_correlation_id
    from projectdollar.utils import fx_conversion
"""

from projectdollar.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
)
from projectdollar.utils.logging import setup_logging, get_logger

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]
