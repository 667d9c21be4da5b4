"""Utility helpers."""

from .logger import setup_logger, get_logger, get_console

__all__ = ["setup_logger", "get_logger", "get_console"]
