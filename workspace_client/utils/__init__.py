"""Utilities package."""

from .logger import get_app_logger, setup_logger, init_app_logger
from .cancellation import CancellationToken
from .signals import Signal

__all__ = [
    "get_app_logger",
    "setup_logger",
    "init_app_logger",
    "CancellationToken",
    "Signal",
]
