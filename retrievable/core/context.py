"""
RequestContext - Cancellation and deadline scope for one operation.

Every adapter call takes a context as its first argument. Backends check it
before touching the network and bound blocking calls by ``remaining()``.

Usage:
    ctx = RequestContext.background(namespace="tenant-a").with_timeout(2.0)
    store.get_entity(ctx, "alice", user)

    # from another thread
    ctx.cancel()
"""

import threading
import time
from dataclasses import dataclass, field, replace
from typing import Optional

from .errors import OperationCancelled, DeadlineExceeded


@dataclass(frozen=True)
class RequestContext:
    """Caller-scoped namespace, deadline and cancellation signal."""

    namespace: str = ""
    deadline: Optional[float] = None  # time.monotonic() value
    _cancel_event: threading.Event = field(
        default_factory=threading.Event, repr=False, compare=False
    )

    @classmethod
    def background(cls, namespace: str = "") -> "RequestContext":
        """Context with no deadline that is only cancelled explicitly."""
        return cls(namespace=namespace)

    def with_timeout(self, seconds: float) -> "RequestContext":
        """Derive a context that expires ``seconds`` from now.

        The derived context shares the cancellation signal of its parent and
        never extends the parent's deadline.
        """
        return self.with_deadline(time.monotonic() + seconds)

    def with_deadline(self, deadline: float) -> "RequestContext":
        if self.deadline is not None:
            deadline = min(deadline, self.deadline)
        return replace(self, deadline=deadline)

    def with_namespace(self, namespace: str) -> "RequestContext":
        return replace(self, namespace=namespace)

    def cancel(self) -> None:
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None when there is none."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self, operation: str = "") -> None:
        """Raise if the context is cancelled or past its deadline."""
        if self.cancelled:
            raise OperationCancelled(
                "Operation cancelled",
                data={"operation": operation, "namespace": self.namespace},
            )
        if self.expired:
            raise DeadlineExceeded(
                "Operation deadline exceeded",
                data={"operation": operation, "namespace": self.namespace},
            )
