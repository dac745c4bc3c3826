"""
Error classes with structured logging.

All errors include correlation context and structured data for observability.

Propagation lanes:
- CacheError / SerializationError: recoverable, handled next to the cache call
  (fall back to the store, or swallow on write-through)
- StoreError: authoritative, always surfaced to the caller
- OperationCancelled: always surfaced, never swallowed
"""

import logging
from typing import Optional, Dict, Any

from retrievable.common.logging import get_logger
from retrievable.common.logging.correlation import get_correlation_id, get_namespace

logger = get_logger(__name__)


class RetrievableError(Exception):
    """
    Base error class for all retrievable errors.

    Automatically logs errors with correlation context when raised.
    Subclasses set ``log_level`` to keep routine conditions (cache misses)
    out of the error stream.
    """

    log_level = logging.ERROR

    def __init__(
        self,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """
        Initialize error with structured context.

        Args:
            message: Human-readable error message
            data: Structured data for observability
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.data = data or {}
        self.cause = cause

        self.correlation_id = get_correlation_id()
        self.namespace = get_namespace()

        self._log_error()

    def _log_error(self):
        """Log error with structured data."""
        log_data = {
            "error_type": self.__class__.__name__,
            "correlation_id": self.correlation_id,
            **self.data,
        }

        if self.cause:
            log_data["cause"] = str(self.cause)

        logger.log(self.log_level, self.message, data=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "data": self.data,
            "correlation_id": self.correlation_id,
            "cause": str(self.cause) if self.cause else None,
        }


# Record / key errors
class InvalidRecordError(RetrievableError, TypeError):
    """Record does not implement the mandatory KeyDerivation capability."""
    pass


class KeyDerivationError(RetrievableError, ValueError):
    """Key material has a shape the record cannot build a key from."""
    pass


class InvalidKeyMaterial(RetrievableError, ValueError):
    """
    Key material resolves to the reserved zero (incomplete) key.

    Rejected before any backend call: reading at the zero key would hand
    back whatever entity the backend last associated with it.
    """
    pass


# Cancellation
class OperationCancelled(RetrievableError):
    """The request context was cancelled before the operation completed."""
    log_level = logging.WARNING


class DeadlineExceeded(OperationCancelled):
    """The request context deadline passed before the operation completed."""
    pass


# Configuration errors
class ConfigurationError(RetrievableError):
    """Error in configuration."""
    pass


# Serialization errors
class SerializationError(RetrievableError):
    """Error converting a record to or from its cache payload."""
    log_level = logging.WARNING


class EncodeFailure(SerializationError):
    """Record state could not be encoded."""
    pass


class DecodeFailure(SerializationError):
    """Payload could not be reconstructed into the target record."""
    pass


# Cache errors
class CacheError(RetrievableError):
    """Error accessing cache."""
    log_level = logging.WARNING


class CacheMiss(CacheError):
    """Entry absent from cache or cache unreachable. Never means 'record absent'."""
    log_level = logging.DEBUG


class PayloadTooLarge(CacheError):
    """Encoded record exceeds the cache item size ceiling."""
    pass


class CacheBackendError(CacheError):
    """Transport or availability failure of the cache backend."""
    pass


# Store errors
class StoreError(RetrievableError):
    """Error accessing durable store."""
    pass


class NotFound(StoreError, LookupError):
    """Durable store has no record at the given key."""
    log_level = logging.INFO


class StoreBackendError(StoreError):
    """Transport, availability or integrity failure of the durable store."""
    pass
