"""
Operation metrics using Prometheus.

Tracks:
- Cache operations by result (hit, miss, error, too_large, ok)
- Store operations by result (ok, not_found, error)
- Orchestrator operation duration
"""

from prometheus_client import Counter, Histogram
import time
from functools import wraps
from typing import Callable, Any

# =============================================================================
# Cache / Store Metrics
# =============================================================================

cache_operations_total = Counter(
    'retrievable_cache_operations_total',
    'Total cache operations',
    ['operation', 'result']  # operation: get, set, delete, refresh; result: hit, miss, ok, error, too_large
)

store_operations_total = Counter(
    'retrievable_store_operations_total',
    'Total durable store operations',
    ['operation', 'result']  # operation: put, get, delete; result: ok, not_found, error
)

# =============================================================================
# Orchestrator Metrics
# =============================================================================

entity_operation_seconds = Histogram(
    'retrievable_entity_operation_seconds',
    'Entity operation duration in seconds',
    ['operation'],  # get_entity, place_entity, delete_entity
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5]
)


# =============================================================================
# Decorators
# =============================================================================

def track_duration(metric: Histogram, labels: dict = None):
    """
    Decorator to track function execution duration.

    Usage:
        @track_duration(entity_operation_seconds, {'operation': 'get_entity'})
        def get_entity(self, ctx, key_material, record):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                duration = time.perf_counter() - start_time
                if labels:
                    metric.labels(**labels).observe(duration)
                else:
                    metric.observe(duration)
        return wrapper
    return decorator


# =============================================================================
# Helper Functions
# =============================================================================

def record_cache_operation(operation: str, result: str):
    """Record a cache operation outcome."""
    cache_operations_total.labels(operation=operation, result=result).inc()


def record_store_operation(operation: str, result: str):
    """Record a durable store operation outcome."""
    store_operations_total.labels(operation=operation, result=result).inc()
