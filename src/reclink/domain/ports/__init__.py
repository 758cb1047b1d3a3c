"""Domain port definitions for adapters."""

from __future__ import annotations

from .parsing import InputFormat, RecordParser
from .store import StoreGateway

__all__ = [
    "InputFormat",
    "RecordParser",
    "StoreGateway",
]
