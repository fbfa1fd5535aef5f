"""Observability infrastructure for logging, metrics, and progress events."""

from .logging import setup_logging
from .metrics import MetricsCollector, SeedManager
from .events import EventBus, RUN_COMPLETED, BATCH_PROGRESS, BATCH_COMPLETED

__all__ = [
    'setup_logging',
    'MetricsCollector', 'SeedManager',
    'EventBus', 'RUN_COMPLETED', 'BATCH_PROGRESS', 'BATCH_COMPLETED'
]
