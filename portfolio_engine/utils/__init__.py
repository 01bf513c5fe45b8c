# portfolio_engine/utils/__init__.py
"""
Utility modules for the portfolio engine.

- logging: Logging configuration (text or JSON output)

Usage:
    from portfolio_engine.utils import setup_logging, get_logger
"""

from portfolio_engine.utils.logging import setup_logging, get_logger

__all__ = [
    "setup_logging",
    "get_logger",
]
