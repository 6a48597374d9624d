"""Request ID management for log correlation.

Provides context-aware correlation IDs for HTTP requests and background
recalculation runs.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# Context variable for request_id (async-safe)
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Return the current request ID, or "no-request-id" outside a request/run."""
    return request_id_var.get() or "no-request-id"


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


@contextmanager
def request_id_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation ID for the duration of a block.

    Keeps an ID that is already set (a recalculation triggered from an HTTP
    request logs under the request's ID) and restores the previous value on
    exit.

    Usage:
        with request_id_scope() as run_id:
            ...
    """
    current = request_id_var.get()
    token = request_id_var.set(request_id or current or generate_request_id())
    try:
        yield request_id_var.get()
    finally:
        request_id_var.reset(token)
