"""Reconciliation core: recursive upsert of nested records and batch coordination."""

from __future__ import annotations

from .coordinator import BatchCoordinator, ImportOptions, import_batch
from .reconciler import Reconciler

__all__ = [
    "BatchCoordinator",
    "ImportOptions",
    "Reconciler",
    "import_batch",
]
