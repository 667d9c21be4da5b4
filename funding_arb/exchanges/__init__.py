"""Funding rate sources and symbol normalization."""

from .base import BaseExchange
from .metadata import EXCHANGES, ExchangeInfo, get_exchange_info, is_zero_fee
from .registry import ExchangeRegistry, SourceDescriptor
from .symbols import normalize_symbol

__all__ = [
    "BaseExchange",
    "EXCHANGES",
    "ExchangeInfo",
    "get_exchange_info",
    "is_zero_fee",
    "ExchangeRegistry",
    "SourceDescriptor",
    "normalize_symbol",
]
