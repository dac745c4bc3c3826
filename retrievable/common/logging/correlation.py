"""Correlation ID context for request tracing."""

import uuid
import logging
import contextvars
from contextlib import contextmanager
from typing import Iterator, Optional


# Context variable for correlation ID (thread-safe, async-safe)
correlation_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

# Context variable for the namespace of the current operation
namespace_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "namespace", default=None
)


def generate_correlation_id() -> str:
    """Generate unique correlation ID."""
    return str(uuid.uuid4())[:8]


def get_correlation_id() -> str | None:
    """Get current correlation ID from context."""
    return correlation_id_var.get()


def set_correlation_id(cid: str | None):
    """Set correlation ID in context."""
    correlation_id_var.set(cid)


def get_namespace() -> str | None:
    """Get current namespace from context."""
    return namespace_var.get()


def set_namespace(namespace: str | None):
    """Set namespace in context."""
    namespace_var.set(namespace)


@contextmanager
def correlation_scope(
    correlation_id: Optional[str] = None,
    namespace: Optional[str] = None,
) -> Iterator[str]:
    """
    Bind a correlation ID (and optionally a namespace) for the enclosed block.

    Generates a correlation ID when none is given. Previous values are
    restored on exit.

    Usage:
        with correlation_scope() as cid:
            store.get_entity(ctx, "alice", user)
    """
    cid = correlation_id or generate_correlation_id()
    cid_token = correlation_id_var.set(cid)
    ns_token = namespace_var.set(namespace)
    try:
        yield cid
    finally:
        correlation_id_var.reset(cid_token)
        namespace_var.reset(ns_token)


class CorrelationLogFilter(logging.Filter):
    """
    Logging filter that adds correlation_id and namespace to log records.

    Use with standard logging to auto-inject context vars.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        record.namespace = get_namespace()
        return True
