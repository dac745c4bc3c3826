"""Monitoring and metrics collection."""

from .metrics import (
    # Decorators
    track_duration,

    # Helper functions
    record_cache_operation,
    record_store_operation,

    # Metrics
    cache_operations_total,
    store_operations_total,
    entity_operation_seconds,
)

__all__ = [
    'track_duration',
    'record_cache_operation',
    'record_store_operation',
    'cache_operations_total',
    'store_operations_total',
    'entity_operation_seconds',
]
