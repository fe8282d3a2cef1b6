"""
Logging module for the virtscreen package.
This module provides the console logging setup used by host applications.
"""

from .setup import setup_logging

__all__ = ["setup_logging"]
